"""
Tests Package - Unit and integration tests for catalog-chat.
============================================================

Test modules:
- test_catalog: Alias registry, CSV loader, metadata index, formatting
- test_indexing: Embedding providers and the ChromaDB course store
- test_rag: Prompts, intent classification, router, chat client
- test_cli: Interactive loop and typer commands
- test_config: Settings loading and application wiring

Run tests with:
    pytest tests/
    pytest tests/ -v
"""
