# agentsdk

Building blocks for streaming LLM agents.

Install with `pip install .`; the only runtime dependency is `httpx`.
Run the tests with `pip install .[test]` and then `pytest`.

## What is in the package

- **Messages and content** (`agentsdk.core.content`): the immutable
  `SystemMessage`, `UserMessage` and `AssistantMessage`, each holding a tuple
  of content blocks: `TextContent`, `ToolUseContent`, `ToolResultContent`,
  `ConfigContent` and `FileContent`. A message refuses blocks that are not
  allowed in it with `TypeError` (a `FileContent` only goes in a user message,
  a `ToolUseContent` only in an assistant message). Helpers:
  `new_system_message`, `new_user_message`, `new_tool_result_message`,
  `new_user_tool_result_message`, `new_file_message` and
  `new_user_message_with_files`. `Role` and `MediaType` are string enums;
  `ContentSupport.supports(media_type)` tells whether a provider takes a media
  type natively.
- **Deltas** (`agentsdk.core.delta`): frozen dataclasses streamed while a
  response is produced: `TextStartDelta`, `TextContentDelta`, `TextEndDelta`,
  `ToolCallStartDelta`, `ToolCallArgumentDelta`, `ToolCallEndDelta`,
  `ToolExecStartDelta`, `ToolExecDelta`, `ToolExecEndDelta`, `MarkerDelta`,
  `ErrorDelta`, `DoneDelta` and `UsageDelta`.
- **Aggregation** (`agentsdk.aggregator`): `DefaultAggregator` folds text and
  tool-call deltas into an `AssistantMessage`; `message()` returns `None`
  when nothing has been collected.
- **Event streams** (`agentsdk.stream`): `EventStream` is a bounded,
  thread-safe queue of deltas. Iterate it (or `deltas()`), `wait()` for it to
  close (the error it closed with is raised), `cancel()` it, and answer a
  marked tool call with `resolve_marker(tool_call_id, approved,
  modified_args, message)`. `replay(messages)` streams stored messages back as
  the deltas a live run would have produced, ending with `DoneDelta`; only
  assistant content and tool results give deltas.
- **Tools** (`agentsdk.core.tool`): `ToolDef`, `ParameterSchema`,
  `PropertyDef`, `ToolFunc` (a tool backed by a function), the thread-safe
  `ToolRegistry` (`get`, `register`, `definitions`, `execute`; an unknown name
  raises `ToolNotFoundError`), and `Marker`, `MarkedTool` and `with_markers`.
- **Provider interfaces** (`agentsdk.core.provider`): the `Provider`,
  `NamedProvider`, `StructuredOutputProvider`, `ContentNegotiator`,
  `Embedder`, `Resolver` and `Extractor` protocols, the `ResolverFunc` and
  `ExtractorFunc` adapters, `provider_name` and `new_id`.
- **Compaction** (`agentsdk.core.compactor`): `CompactConfig.to_compactor()`
  builds a `NoopCompactor`, `SlidingWindowCompactor` (first message plus the
  last *n*) or `SummarizeCompactor` (asks the provider to summarise all but
  the first message and the last four). `messages_to_text` renders messages
  as plain text.
- **Conversation tree data** (`agentsdk.core.node`): `TreePath` and
  `parse_tree_path`, `Node`, `NodeState`, `Checkpoint`, `Result` with
  `new_delta` / `new_final`, `TxOp` and `TxOpKind`, and the `Store`,
  `StoreTx`, `WAL` and `Tokenizer` protocols.
- **Write-ahead log** (`agentsdk.memwal`): `MemWAL`, an in-memory `WAL` for
  tests, with `begin`, `append`, `commit`, `abort`, `recover` and `replay`.
- **Errors** (`agentsdk.core.errors`): `ProviderError`, `FallbackError`,
  `RetryError` and the simpler error classes, plus `is_transient` and
  `classify_http_status` (429, 408 and 5xx are transient).
- **Cancellation** (`agentsdk.core.cancel`): `Context`, a cancellation token
  passed to every blocking call; `child()` gives a context that is canceled
  with its parent.
- **Resilient providers**: `agentsdk.providers.retry.RetryProvider` retries a
  call that fails to start, with exponential backoff (`default_config()`:
  three attempts, 0.5 s base delay, 10 s cap, doubling, transient errors
  only); `agentsdk.providers.fallback.FallbackProvider` tries providers in
  order and raises `FallbackError` holding every error when none starts.
- **Ollama**: `agentsdk.providers.ollama_client.Client` speaks the Ollama
  HTTP API (`generate`, `generate_with_model`, `generate_stream`, `embed`,
  `chat_stream`); `agentsdk.providers.ollama.OllamaAdapter` turns it into a
  provider and `OllamaEmbedder` embeds a batch of texts, one request per text.
- **Test helpers** (`agentsdk.agenttest`): `ScriptedProvider`, `MockTool`,
  `text_response`, `tool_call_response`, and the `collect_*` and `assert_*`
  helpers.

## Folding deltas into a message

```python
from agentsdk.aggregator import DefaultAggregator
from agentsdk.agenttest import text_response

aggregator = DefaultAggregator()
for delta in text_response("Hello there"):
    aggregator.push(delta)

message = aggregator.message()   # AssistantMessage with one TextContent block
```

## Falling back between providers

```python
from agentsdk.core.cancel import Context
from agentsdk.core.content import new_user_message
from agentsdk.core.errors import is_transient
from agentsdk.providers.fallback import FallbackProvider

provider = FallbackProvider(primary, backup, fallback_on=is_transient)
deltas = provider.chat_stream(Context(), [new_user_message("Hi")], [])
```

`primary` and `backup` are any objects with a
`chat_stream(ctx, messages, tools)` method.

## Talking to Ollama

```python
from agentsdk.core.cancel import Context
from agentsdk.core.content import new_user_message
from agentsdk.providers.ollama import OllamaAdapter
from agentsdk.providers.ollama_client import Client

adapter = OllamaAdapter(Client("http://localhost:11434", "llama3.2"))
for delta in adapter.chat_stream(Context(), [new_user_message("Hi")], []):
    print(delta)
```

This needs an Ollama server running at the given address.

## What the package does not do

- There is no agent loop: nothing here sends a conversation to a provider,
  runs the requested tools, waits on markers and feeds the results back.
  The pieces such a loop is built from are here (`EventStream`,
  `DefaultAggregator`, `ToolRegistry`, `MarkedTool`, the compactors), but you
  drive them yourself. Sub-agent delegation is not provided either.
- There is no conversation tree or persistent store: `agentsdk.core.node`
  only defines the data types and the `Store` / `WAL` protocols, and
  `MemWAL` keeps its log in memory only.
- Ollama is the only model service with a client; there are no adapters for
  other hosted APIs.
- There is no command-line program.