import re

from blogsmith.core.modules.llm.prompts import TITLE_COUNT

_NUMBERING_RE = re.compile(r"^\d+\.\s*")


def parse_titles(content: str, limit: int = TITLE_COUNT) -> list[str]:
    """
    Parse one-title-per-line LLM output.

    Blank lines are skipped and leading "1. " style numbering is stripped.
    At most `limit` titles are returned.
    """
    titles = []
    for raw_line in content.split("\n"):
        if not raw_line.strip():
            continue
        title = _NUMBERING_RE.sub("", raw_line.strip()).strip()
        if title:
            titles.append(title)
    return titles[:limit]
