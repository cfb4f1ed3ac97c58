from __future__ import annotations

from wordgen.service.coordinator import GenerationCoordinator, build_coordinator

try:
    from fastmcp import FastMCP
except ImportError as exc:  # pragma: no cover - runtime dependency guard
    raise RuntimeError(
        "FastMCP is required to run the MCP server. Install the project with `pip install -e .`."
    ) from exc


SERVER_TITLE = "WordGen"
SERVER_INSTRUCTIONS = (
    "Use generate_words to list the words that can be built from a set of letters. "
    "Set min_length and max_length to narrow the result."
)
MAX_LISTED = 200

mcp = FastMCP(name=SERVER_TITLE, instructions=SERVER_INSTRUCTIONS)

_coordinator: GenerationCoordinator | None = None


def get_coordinator() -> GenerationCoordinator:
    global _coordinator
    if _coordinator is None:
        _coordinator = build_coordinator()
    return _coordinator


def generate_words(
    characters: str,
    min_length: int | None = None,
    max_length: int | None = None,
    language: str = "en",
) -> str:
    """Generate words from letters; valid dictionary words are listed first."""
    response = get_coordinator().generate(
        {
            "characters": characters,
            "min_length": min_length,
            "max_length": max_length,
            "language": language,
        }
    )
    if not response.success:
        return f"error {response.error.code}: {response.error.message}"

    data = response.data
    ranked = sorted(data.combinations, key=lambda c: (not c.is_valid, -c.complexity, c.word))

    llm_results = ""
    for combination in ranked[:MAX_LISTED]:
        marker = "valid" if combination.is_valid else "unverified"
        llm_results += f"{combination.word} (complexity {combination.complexity}, {marker})"
        if combination.definition:
            llm_results += f": {combination.definition}"
        llm_results += "\n"

    llm_results += "\n"
    llm_results += f"{data.statistics.valid_words} valid of {len(data.combinations)} generated"
    if data.truncated.status:
        llm_results += f" (truncated: {data.truncated.reason})"
    if response.error is not None:
        llm_results += f"\nwarning {response.error.code}: {response.error.message}"
    return llm_results.strip()


mcp.tool(name="generate_words", description="Generate candidate words from a set of letters.")(generate_words)


if __name__ == "__main__":
    mcp.run("http")
