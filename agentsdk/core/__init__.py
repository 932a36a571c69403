"""Core types: messages, deltas, tools, errors, cancellation, compaction and tree data."""