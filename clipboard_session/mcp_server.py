#!/usr/bin/env python3
"""Clipboard Session MCP Server - presentation surface for the session core."""

import asyncio
import json
import logging
import sys
from typing import Any, Dict, List

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent
from mcp.server.models import InitializationOptions
from mcp.server.lowlevel import NotificationOptions

from clipboard_session.core.config import SessionConfig, load_config
from clipboard_session.core.host import LocalClipboardHost
from clipboard_session.core.session import SessionController

logger = logging.getLogger(__name__)

INDEX_SCHEMA = {
    "type": "object",
    "properties": {
        "index": {
            "type": "integer",
            "description": "Position of the entry in the list (0 = newest)",
            "minimum": 0,
        }
    },
    "required": ["index"],
}

EMPTY_SCHEMA = {"type": "object", "properties": {}}


class ClipboardSessionMCPServer:
    """MCP Server exposing one clipboard session as tools."""

    def __init__(self, host=None, config: SessionConfig = None):
        self.config = config or load_config()
        self.host = host or LocalClipboardHost()
        self.session = SessionController(self.host, self.config)

        self.app = Server("clipboard-session")
        self._register_handlers()

    def _register_handlers(self):
        """Register MCP protocol handlers."""

        @self.app.list_tools()
        async def list_tools() -> List[Tool]:
            return self._tool_definitions()

        @self.app.call_tool()
        async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
            """Handle MCP tool calls with structured output."""
            try:
                result = await self._dispatch_tool_call(name, arguments or {})
                return [
                    TextContent(
                        type="text",
                        text=json.dumps(result, indent=2, ensure_ascii=False),
                    )
                ]
            except Exception as e:
                logger.error(f"Tool {name} failed: {e}")
                error_result = {"error": str(e), "tool": name, "arguments": arguments}
                return [
                    TextContent(type="text", text=json.dumps(error_result, indent=2))
                ]

    def _tool_definitions(self) -> List[Tool]:
        return [
            Tool(
                name="clip_list",
                description="Show clipboard entries, selection and editing state",
                inputSchema=EMPTY_SCHEMA,
            ),
            Tool(
                name="clip_select",
                description="Select an entry (validates it when it looks like JSON)",
                inputSchema=INDEX_SCHEMA,
            ),
            Tool(
                name="clip_edit",
                description="Replace the content of the selected entry",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "content": {
                            "type": "string",
                            "description": "New content for the selected entry",
                        }
                    },
                    "required": ["content"],
                },
            ),
            Tool(
                name="clip_save",
                description="Finish editing and re-validate the selected entry",
                inputSchema=EMPTY_SCHEMA,
            ),
            Tool(
                name="clip_delete",
                description="Delete the entry at an index",
                inputSchema=INDEX_SCHEMA,
            ),
            Tool(
                name="clip_clear",
                description="Delete all clipboard entries",
                inputSchema=EMPTY_SCHEMA,
            ),
            Tool(
                name="clip_copy",
                description="Copy the selected entry back to the system clipboard",
                inputSchema=EMPTY_SCHEMA,
            ),
            Tool(
                name="clip_seed",
                description="Add sample clipboard entries",
                inputSchema=EMPTY_SCHEMA,
            ),
            Tool(
                name="json_validate",
                description="Validate the selected entry as JSON",
                inputSchema=EMPTY_SCHEMA,
            ),
            Tool(
                name="json_format",
                description="Pretty-print the selected JSON entry",
                inputSchema=EMPTY_SCHEMA,
            ),
            Tool(
                name="json_minify",
                description="Minify the selected JSON entry",
                inputSchema=EMPTY_SCHEMA,
            ),
            Tool(
                name="json_search",
                description="Narrow the selected JSON tree to keys and values matching a query",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Case-insensitive text to look for",
                        }
                    },
                    "required": ["query"],
                },
            ),
        ]

    async def _dispatch_tool_call(
        self, name: str, arguments: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Dispatch tool calls to appropriate handlers."""
        handlers = {
            "clip_list": self._handle_clip_list,
            "clip_select": self._handle_clip_select,
            "clip_edit": self._handle_clip_edit,
            "clip_save": self._handle_clip_save,
            "clip_delete": self._handle_clip_delete,
            "clip_clear": self._handle_clip_clear,
            "clip_copy": self._handle_clip_copy,
            "clip_seed": self._handle_clip_seed,
            "json_validate": self._handle_json_validate,
            "json_format": self._handle_json_format,
            "json_minify": self._handle_json_minify,
            "json_search": self._handle_json_search,
        }

        handler = handlers.get(name)
        if not handler:
            raise ValueError(f"Unknown tool: {name}")

        return await handler(arguments)

    def _state(self) -> Dict[str, Any]:
        return self.session.snapshot().model_dump()

    async def _handle_clip_list(self, args: Dict[str, Any]) -> Dict[str, Any]:
        state = self._state()
        state["count"] = len(state["entries"])
        return state

    async def _handle_clip_select(self, args: Dict[str, Any]) -> Dict[str, Any]:
        index = int(args["index"])
        if not await self.session.select(index):
            return {"error": f"No entry at index {index}", "index": index}
        return self._state()

    async def _handle_clip_edit(self, args: Dict[str, Any]) -> Dict[str, Any]:
        if not self.session.edit(args["content"]):
            return {"error": "No entry selected"}
        return self._state()

    async def _handle_clip_save(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return (await self.session.save()).model_dump()

    async def _handle_clip_delete(self, args: Dict[str, Any]) -> Dict[str, Any]:
        index = int(args["index"])
        result = await self.session.delete(index)
        if result is None:
            return {"error": f"No entry at index {index}", "index": index}
        return {"result": result.model_dump(), "state": self._state()}

    async def _handle_clip_clear(self, args: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.session.clear()
        return {"result": result.model_dump(), "state": self._state()}

    async def _handle_clip_copy(self, args: Dict[str, Any]) -> Dict[str, Any]:
        copied = await self.session.copy_selected()
        return {"status": "copied" if copied else "failed"}

    async def _handle_clip_seed(self, args: Dict[str, Any]) -> Dict[str, Any]:
        seeded = await self.session.seed_samples()
        state = self._state()
        state["status"] = "seeded" if seeded else "failed"
        return state

    async def _handle_json_validate(self, args: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.session.validate()
        if result is None:
            return {"error": "Selected entry is not JSON"}
        return result.model_dump()

    async def _handle_json_format(self, args: Dict[str, Any]) -> Dict[str, Any]:
        formatted = await self.session.format()
        if formatted is None:
            return {"error": "Failed to format selected entry"}
        return {"content": formatted}

    async def _handle_json_minify(self, args: Dict[str, Any]) -> Dict[str, Any]:
        minified = await self.session.minify()
        if minified is None:
            return {"error": "Failed to minify selected entry"}
        return {"content": minified}

    async def _handle_json_search(self, args: Dict[str, Any]) -> Dict[str, Any]:
        return self.session.search(args.get("query", "")).model_dump()

    async def run(self):
        """Run MCP server over stdio."""
        await self.session.start()
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.app.run(
                    read_stream,
                    write_stream,
                    InitializationOptions(
                        server_name="clipboard-session",
                        server_version="1.0.0",
                        capabilities=self.app.get_capabilities(
                            notification_options=NotificationOptions(),
                            experimental_capabilities={},
                        ),
                    ),
                )
        finally:
            self.session.close()


async def async_main():
    """Main async entry point."""
    server = ClipboardSessionMCPServer()
    await server.run()


def main():
    """Synchronous entry point for console script."""
    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Clipboard Session MCP Server stopped")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise


if __name__ == "__main__":
    main()
