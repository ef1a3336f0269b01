"""Translation statistics scraped from AppVeyor build logs.

The translation step of the Windows build prints one line per locale, e.g.::

    [12:00:05] * de_DE 120 3 0 0 0 97%

The three numbers between the untranslated count and the percentage are
not reported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

TRANSLATION_STATS_HEADING = "## Translation stats"

_TRANSLATION_STAT_RE = re.compile(
    r"^\[\d{2}:\d{2}:\d{2}\][ \t]*\*?[ \t]*"
    r"(?P<language>[A-Za-z]{2}_[A-Za-z]{2})[ \t]*"
    r"(?P<translated>\d+)[ \t]*"
    r"(?P<untranslated>\d+)[ \t]*"
    r"\d+[ \t]*\d+[ \t]*\d+[ \t]*"
    r"(?P<percentage>\d+)%$",
    re.MULTILINE,
)


@dataclass(frozen=True)
class TranslationStat:
    translated: int
    untranslated: int
    percentage: int


def extract_translation_stats(log: str) -> dict[str, TranslationStat]:
    """Return per-language stats found anywhere in the log.

    A later line for the same language overwrites an earlier one. An empty
    dict means nothing matched.
    """
    stats: dict[str, TranslationStat] = {}
    for match in _TRANSLATION_STAT_RE.finditer(log.replace("\r", "")):
        stats[match.group("language")] = TranslationStat(
            translated=int(match.group("translated")),
            untranslated=int(match.group("untranslated")),
            percentage=int(match.group("percentage")),
        )
    return stats


def render_translation_table(stats: dict[str, TranslationStat]) -> str:
    """Render the stats section, heading included, sorted by language code."""
    lines = [
        TRANSLATION_STATS_HEADING,
        "",
        "|language|translated|untranslated|percentage done|",
        "|--------|----------|------------|---------------|",
    ]
    for language in sorted(stats):
        stat = stats[language]
        lines.append(f"|{language}|{stat.translated}|{stat.untranslated}|{stat.percentage}|")
    return "\n".join(lines) + "\n\n"
