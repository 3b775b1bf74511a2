"""
Tests for the ToolDispatcher, end to end against the in-memory language server.
"""

from unittest.mock import MagicMock

from lsp_bridge.ports.tools.tools_port import PromptsHandlerPort, ToolsHandlerPort
from lsp_bridge.use_cases.tools.dispatcher import ToolDispatcher


def _read(path):
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


class TestToolDispatcher:
    """Test cases for ToolDispatcher error handling."""

    def test_unexpected_error_is_internal_error(self, mock_logger):
        tools = MagicMock(spec=ToolsHandlerPort)
        tools.dispatch.side_effect = KeyError("oops")
        dispatcher = ToolDispatcher(tools, MagicMock(spec=PromptsHandlerPort), mock_logger)

        result = dispatcher.call_tool("read_definition", {"symbolName": "F"})

        assert result.is_error
        assert result.error.kind == "internal_error"
        assert result.error.operation == "read_definition"
        mock_logger.exception.assert_called_once()

    def test_none_arguments_are_empty(self, mock_logger):
        tools = MagicMock(spec=ToolsHandlerPort)
        tools.dispatch.return_value = "ok"
        dispatcher = ToolDispatcher(tools, MagicMock(spec=PromptsHandlerPort), mock_logger)

        assert dispatcher.call_tool("get_codelens").text == "ok"
        tools.dispatch.assert_called_once_with("get_codelens", {}, None)


class TestDispatcherEndToEnd:
    """Scenarios running through the container wiring."""

    def test_apply_text_edit(self, dispatcher, a_go):
        result = dispatcher.call_tool(
            "apply_text_edit",
            {
                "filePath": "a.go",
                "edits": [
                    {
                        "range": {
                            "start": {"line": 1, "character": 0},
                            "end": {"line": 1, "character": 11},
                        },
                        "newText": "func F() { return }",
                    }
                ],
            },
        )

        assert not result.is_error
        assert "Applied 1 edit" in result.text
        assert _read(a_go).split("\n")[:2] == ["package a", "func F() { return }"]

    def test_apply_text_edit_with_failing_server(self, dispatcher, fake_server, a_go):
        fake_server.did_open = MagicMock(side_effect=RuntimeError("server gone"))
        edit = {
            "range": {"start": {"line": 1, "character": 0}, "end": {"line": 1, "character": 11}},
            "newText": "func F() { return }",
        }

        result = dispatcher.call_tool("apply_text_edit", {"filePath": "a.go", "edits": [edit]})

        assert not result.is_error
        assert "file was written" in result.text
        assert _read(a_go) == "package a\nfunc F() { return }\n"

    def test_overlapping_edits_reported(self, dispatcher, a_go):
        before = _read(a_go)
        edit = {
            "range": {"start": {"line": 0, "character": 0}, "end": {"line": 0, "character": 4}},
            "newText": "x",
        }

        result = dispatcher.call_tool("apply_text_edit", {"filePath": "a.go", "edits": [edit, edit]})

        assert result.error.kind == "invalid_edit_range"
        assert _read(a_go) == before

    def test_read_definition(self, dispatcher, fake_server_with_f):
        result = dispatcher.call_tool("read_definition", {"symbolName": "F"})
        assert "2|func F() {}" in result.text

    def test_symbol_not_found(self, dispatcher, fake_server):
        result = dispatcher.call_tool("read_definition", {"symbolName": "Nope"})
        assert result.error.kind == "symbol_not_found"

    def test_schema_error(self, dispatcher):
        result = dispatcher.call_tool("get_codelens", {"filePath": "a.go", "extra": 1})
        assert result.error.kind == "schema_validation"
        assert result.error.details == {"field": "extra"}

    def test_unknown_tool(self, dispatcher):
        result = dispatcher.call_tool("nope", {})
        assert result.error.kind == "unknown_operation"

    def test_diagnostics_not_synchronized(self, dispatcher):
        result = dispatcher.call_tool("get_diagnostics", {"filePath": "a.go"})
        assert result.error.kind == "document_not_synchronized"

    def test_prompt(self, dispatcher, fake_server_with_f):
        response = dispatcher.get_prompt("read-definition", {"symbolName": "F"})
        assert "2|func F() {}" in response.text

    def test_listing(self, dispatcher):
        assert len(dispatcher.list_tools()) == 6
        assert len(dispatcher.list_prompts()) == 4
