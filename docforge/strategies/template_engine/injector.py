"""Section injector strategy.

Replaces ``{{name}}`` placeholders in storage-format templates with
generated content, shaping the content to the structure the placeholder
sits in.
"""

import logging
import re

from docforge.interfaces.template import BaseSectionInjector, PlaceholderKind

logger = logging.getLogger(__name__)


_BOLD = re.compile(r"\*\*(.*?)\*\*")
_ITALIC = re.compile(r"\*(.*?)\*")
_INLINE_CODE = re.compile(r"`(.*?)`")


def _non_blank_lines(content: str) -> list[str]:
    return [line.strip() for line in content.split("\n") if line.strip()]


def content_to_table_rows(content: str) -> str:
    return "".join(f"<tr><td>{line}</td></tr>" for line in _non_blank_lines(content))


def content_to_list_items(content: str) -> str:
    return "".join(f"<li>{line}</li>" for line in _non_blank_lines(content))


def markdown_to_storage(content: str) -> str:
    """Convert the small Markdown subset the generator emits to storage markup.

    Bold, italic and inline code are converted; a blank line starts a new
    paragraph and a single newline becomes a line break.
    """
    content = _BOLD.sub(r"<strong>\1</strong>", content)
    content = _ITALIC.sub(r"<em>\1</em>", content)
    content = _INLINE_CODE.sub(r"<code>\1</code>", content)
    content = content.replace("\n\n", "</p><p>")
    return content.replace("\n", "<br/>")


class SectionInjector(BaseSectionInjector):
    """Fills ``{{name}}`` placeholders one at a time."""

    def fill_section(
        self,
        document: str,
        section_id: str,
        content: str,
        kind: PlaceholderKind,
    ) -> str:
        placeholder = f"{{{{{section_id}}}}}"
        if placeholder not in document:
            logger.warning(f"Placeholder not found: {placeholder}")
            return document

        match kind:
            case PlaceholderKind.TABLE:
                shaped = content_to_table_rows(content)
            case PlaceholderKind.LIST:
                shaped = content_to_list_items(content)
            case PlaceholderKind.MACRO:
                shaped = content
            case _:
                shaped = markdown_to_storage(content)

        logger.debug(f"Filled {placeholder} as {kind.value} ({len(shaped)} chars)")
        return document.replace(placeholder, shaped, 1)
