"""FastMCP server exposing the edit tools over stdio.

The server is built by :func:`create_server` around one :class:`EditTools`
instance, so the sandbox root and engine settings come from the
:class:`Config` passed in rather than module-level state.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Literal

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from .config import Config
from .log_setup import setup_logger
from .tools import EditTools

logger = logging.getLogger(__name__)

SERVER_NAME = "smart-edit"

FilePath = Annotated[str, Field(description="Path to the file, relative to the project directory")]


def create_server(config: Config | None = None) -> FastMCP:
    """Build a FastMCP server whose tools operate inside ``config.SANDBOX_ROOT``."""
    config = config or Config()
    tools = EditTools(config)
    mcp = FastMCP(SERVER_NAME)

    @mcp.tool(
        annotations=ToolAnnotations(
            title="Smart Replace",
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=False,
            openWorldHint=False,
        )
    )
    def smart_replace(
        file_path: FilePath,
        old_code: Annotated[
            str,
            Field(description="Code to find (can be partial, matched per match_mode)", min_length=1),
        ],
        new_code: Annotated[str, Field(description="Code to replace it with")],
        match_mode: Annotated[
            Literal["exact", "fuzzy", "smart"],
            Field(
                description=(
                    "exact: verbatim match; fuzzy: ignores whitespace differences; "
                    "smart: trimmed line, block and token matching (recommended)"
                )
            ),
        ] = "smart",
    ) -> dict[str, Any]:
        """Replace one occurrence of old_code with new_code. Use search_in_file first if unsure of the exact text."""
        return tools.apply_direct_edit(file_path, old_code, new_code, match_mode)

    @mcp.tool(
        annotations=ToolAnnotations(
            title="Apply Patch",
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=False,
            openWorldHint=False,
        )
    )
    def apply_patch(
        file_path: FilePath,
        patch_content: Annotated[
            str,
            Field(description="Unified-diff style hunks (@@ headers, ' ', '-', '+' lines)", min_length=1),
        ],
    ) -> dict[str, Any]:
        """Apply a single-file patch. Malformed headers and prefixes are repaired; falls back to a block replace."""
        return tools.apply_patch(file_path, patch_content)

    @mcp.tool(annotations=ToolAnnotations(title="Search In File", readOnlyHint=True))
    def search_in_file(
        file_path: FilePath,
        search_text: Annotated[str, Field(description="Literal text to search for", min_length=1)],
        case_sensitive: Annotated[bool, Field(description="Match case")] = True,
    ) -> dict[str, Any]:
        """Find every line containing search_text, with line numbers."""
        return tools.search_in_file(file_path, search_text, case_sensitive)

    @mcp.tool(annotations=ToolAnnotations(title="Get Code Context", readOnlyHint=True))
    def get_code_context(
        file_path: FilePath,
        line_number: Annotated[int, Field(description="1-indexed center line", ge=1)],
        context_lines: Annotated[int, Field(description="Lines before and after", ge=0)] = config.CONTEXT_LINES,
    ) -> dict[str, Any]:
        """Return numbered lines ("N: text") around line_number."""
        return tools.get_code_context(file_path, line_number, context_lines)

    @mcp.tool(
        annotations=ToolAnnotations(
            title="Delete Lines",
            readOnlyHint=False,
            destructiveHint=True,
            idempotentHint=False,
            openWorldHint=False,
        )
    )
    def delete_lines(
        file_path: FilePath,
        start_line: Annotated[int, Field(description="First line to delete (1-indexed)")],
        end_line: Annotated[int, Field(description="Last line to delete (inclusive)")],
    ) -> dict[str, Any]:
        """Delete an inclusive range of lines."""
        return tools.delete_lines(file_path, start_line, end_line)

    @mcp.tool(annotations=ToolAnnotations(title="Read File Content", readOnlyHint=True))
    def read_file_content(file_path: FilePath) -> dict[str, Any]:
        """Read a whole file with its size and line count."""
        return tools.read_file_content(file_path)

    return mcp


def main(config: Config | None = None) -> None:
    """Run the server on stdio."""
    config = config or Config.load()
    setup_logger(config.LOG_DIR, config.LOG_LEVEL, stderr=True)
    logger.info("Smart edit MCP server starting (sandbox: %s)", config.SANDBOX_ROOT)
    create_server(config).run()


if __name__ == "__main__":
    main()
