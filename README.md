# codeagent

codeagent is a chat agent for the terminal. You type a request and the
model's reply streams in as it arrives. The model can use a set of file tools
to look at and change files, with paths taken relative to the current working
directory.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Usage

Put your API key in the environment and start the chat:

```
export ANTHROPIC_API_KEY=placeholder
codeagent
```

`python -m codeagent.cli` starts the same program.

The client reads these environment variables:

| Variable               | Use                                                          |
|------------------------|--------------------------------------------------------------|
| `ANTHROPIC_API_KEY`    | Sent as the `x-api-key` header.                              |
| `ANTHROPIC_AUTH_TOKEN` | If set, sent as `Authorization: Bearer <value>`.            |
| `ANTHROPIC_BASE_URL`   | The API base URL. The default is `https://api.anthropic.com`. |

The chat fills the screen. The transcript sits above a three-line input box,
and the input box holds at most 280 characters. Press Enter to send a message.
Press Ctrl-C or Esc to leave. Any text still in the input box is printed when
the program exits. If a fatal error occurs, it is printed to standard error
and the command exits with status 1.

Every request uses the model `claude-3-haiku-20240307` with a limit of 4096
output tokens and a fixed system prompt. When the model calls a tool, a line
such as `🔧 Using tool: read_file` appears in the transcript. The tool's result
goes back to the model, and the turn keeps going until the model replies
without calling any more tools. If a request fails, the transcript shows
`Error: ...` in place of a reply.

## Tools

| Tool             | What it does |
|------------------|--------------|
| `read_file`      | Returns a file's contents, or only the lines from `start_line` to `end_line` (1-based, inclusive). |
| `list_files`     | Returns the entries of a directory (default `.`) as a JSON array, with directories ending in `/`. Set `recursive` to true to walk the whole tree, and use `max_depth` to limit how deep it goes. An empty listing is returned as `null`. |
| `create_file`    | Writes a file and creates any missing parent directories. It refuses to replace an existing file unless `overwrite` is true. |
| `edit_file`      | Edits an existing file in one of these modes: `replace`, `insert_after`, `insert_before`, `append`, `prepend` or `delete_line`. |
| `append_to_file` | Adds `content` to the end of a file and creates the file if it is missing. If `newline` is true and the file does not already end with a newline, one is added first. |
| `get_file_info`  | Returns a JSON object with `path`, `is_directory`, `size`, `mode`, `mod_time` and `exists`. For files that are not empty, it also includes `line_count`. |

For safety, `replace` changes text only when `old_str` occurs exactly once in
the file. The line-based modes work only when exactly one line contains
`old_str`, or when you give a `line_number`.

## Library use

You can use the tools without the chat screen:

```python
from codeagent.catalog import get_all_tools

tools = {tool.name: tool for tool in get_all_tools()}
print(tools["read_file"].run('{"path": "README.md", "start_line": 1, "end_line": 3}'))
```

`ToolDefinition.run` accepts a JSON string, bytes or a mapping. A tool raises
`codeagent.tooling.ToolError` when its input is invalid or the file operation
fails. `ToolDefinition.to_api()` returns the tool description in the form the
messages API expects.

`codeagent.agent.Agent` ties a client and a list of tools together:

- `execute_tool(tool_id, name, tool_input)` runs a tool and returns a
  `tool_result` block. It sets `is_error` if the tool is unknown or raised an
  error.
- `run_inference_with_streaming(conversation, on_streaming_text)` sends the
  conversation and passes each streamed text fragment to the callback. It
  returns the assembled `Message`.

`codeagent.client.Config.from_env()` builds an `AnthropicClient` from the
environment variables listed above. `codeagent.chat.ChatSession` keeps the
conversation and the transcript without any terminal interface. Its
`submit(user_input)` method runs a complete turn, and `transcript()` returns
the rendered messages.

## Limitations

The conversation is held only in memory. It is not saved, and it is lost when
the program exits. The model, the token limit and the system prompt are fixed
and cannot be changed from the command line.