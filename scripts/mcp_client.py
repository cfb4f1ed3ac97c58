import asyncio
import sys

from fastmcp import Client


async def main(letters: str) -> None:
    async with Client("http://localhost:8000/mcp") as client:
        tools = await client.list_tools()

        print(f"Available tools ({len(tools)}):")
        for tool in tools:
            print(f"* **{tool.name}**: {tool.description}")

        result = await client.call_tool("generate_words", {"characters": letters, "min_length": 3})
        print(result.content[0].text)


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "listen"))
