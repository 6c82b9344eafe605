"""
CLI Main - Typer command-line interface.
========================================

Commands:
- chat: Interactive question loop (default when no command is given)
- ask: Answer a single question
- courses: Compact course listing for one instructor
- index: Push the schedule into the vector store
- instructors: List canonical instructors and departments in the schedule
- info: Show configuration
"""

from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from catalog_chat.app import build_registry, build_router, load_index
from catalog_chat.catalog.formatting import pretty_print_documents
from catalog_chat.rag.router import EMPTY_QUESTION_REPLY, Router
from catalog_chat.shared.config import get_settings
from catalog_chat.shared.exceptions import CatalogChatError
from catalog_chat.shared.logging import get_console, get_logger, setup_logging

logger = get_logger(__name__)

PROMPT = "\nCatalog search> "
EXIT_COMMANDS = {"exit", "quit", ":q"}

app = typer.Typer(
    name="catalog-chat",
    help="""Ask questions about the university class schedule.

Instructor questions ("What is Phil Peterson teaching?") are answered straight
from the schedule; everything else goes through a semantic search of the
indexed courses and an LLM.

QUICK START:

  catalog-chat index                        # Step 1: Index the schedule CSV
  catalog-chat                              # Step 2: Ask questions interactively
  catalog-chat ask "Where does Bioinformatics meet?"
""",
    add_completion=False,
    rich_markup_mode="rich",
)

console: Console = get_console()


def _configure_logging(verbose: bool = False) -> None:
    settings = get_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.get_effective_log_level(),
        use_rich=settings.logging.rich_console,
        log_file=settings.logging.file or None,
        log_format=settings.logging.format,
        force=True,
    )


def _build_router_or_exit() -> Router:
    """Build the router, exiting with status 1 on startup failure."""
    try:
        return build_router()
    except CatalogChatError as e:
        console.print(f"[red]Startup failed:[/red] {e}")
        raise typer.Exit(1)


def run_interactive(
    router: Router,
    out: Optional[Console] = None,
    read: Optional[Callable[[str], str]] = None,
) -> int:
    """
    Read questions line by line and print the answers.

    Errors from a single question are printed and the loop continues. The loop
    ends on EOF, Ctrl+C or one of the exit commands.

    Returns:
        Number of questions answered
    """
    out = out or console
    read = read or out.input
    answered = 0

    while True:
        try:
            question = read(PROMPT)
        except (EOFError, KeyboardInterrupt):
            out.print()
            break

        question = question.strip()
        if not question:
            out.print(EMPTY_QUESTION_REPLY)
            continue
        if question.lower() in EXIT_COMMANDS:
            break

        try:
            answer = router.answer(question)
        except CatalogChatError as e:
            logger.debug("Question failed", exc_info=True)
            out.print(f"Error processing your question: {e}", markup=False, highlight=False)
            continue

        out.print(answer, markup=False, highlight=False)
        answered += 1

    return answered


# ─────────────────────────────────────────────────────────────────────────────
# Commands
# ─────────────────────────────────────────────────────────────────────────────


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Start the interactive assistant when no command is given."""
    _configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        chat()


@app.command()
def chat():
    """
    💬 Ask questions interactively.

    Type a question at the prompt; 'exit' or Ctrl+D quits.
    """
    router = _build_router_or_exit()
    console.print("Courses and instructors loaded.")
    console.print("Entering interactive mode. Type your questions below:")
    run_interactive(router)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question about the schedule (wrap in quotes)."),
    show_matches: bool = typer.Option(
        False,
        "--show-matches",
        help="Print the raw vector store matches before answering.",
    ),
):
    """
    ❓ Answer a single question.

    Examples:
        catalog-chat ask "What courses is Phil Peterson teaching?"
        catalog-chat ask "Can I learn guitar this semester?" --show-matches
    """
    router = _build_router_or_exit()

    if show_matches:
        try:
            documents = router.search.query_similar(question, router.top_k)
        except CatalogChatError as e:
            console.print(f"[yellow]Could not fetch matches: {e}[/yellow]")
        else:
            console.print(Panel(pretty_print_documents(documents) or "(none)", title="Matches"))

    try:
        answer = router.answer(question)
    except CatalogChatError as e:
        console.print(f"Error processing your question: {e}", markup=False, highlight=False)
        raise typer.Exit(1)

    console.print(answer, markup=False, highlight=False)


@app.command()
def courses(
    name: str = typer.Argument(..., help="Instructor name or alias (wrap in quotes)."),
):
    """
    📚 List an instructor's courses, one line each.

    Examples:
        catalog-chat courses "Phil Peterson"
    """
    router = _build_router_or_exit()

    try:
        listing = router.courses_for(name)
    except CatalogChatError as e:
        console.print(f"Error processing your question: {e}", markup=False, highlight=False)
        raise typer.Exit(1)

    console.print(listing, markup=False, highlight=False)


@app.command()
def index(
    csv_path: Optional[Path] = typer.Option(
        None,
        "--csv",
        help="Schedule CSV to index (defaults to the configured file).",
    ),
    rebuild: bool = typer.Option(
        False,
        "--rebuild", "-r",
        help="Delete both collections and index from scratch.",
    ),
):
    """
    📦 Index the schedule in the vector store.

    Indexing is skipped when the collections already hold documents, unless
    --rebuild is given.
    """
    from catalog_chat.catalog.metadata import MetadataIndex
    from catalog_chat.indexing.vector_store import ChromaCourseStore

    settings = get_settings()
    try:
        registry = build_registry(settings)
        if csv_path is not None:
            metadata = MetadataIndex.from_csv(
                csv_path, registry=registry, encoding=settings.catalog.encoding
            )
        else:
            metadata = load_index(settings, registry)

        store = ChromaCourseStore(registry=registry)
        if rebuild:
            store.clear()
        added = store.add_courses(metadata.courses)
        existing = store.count() if not added else 0
    except CatalogChatError as e:
        console.print(f"[red]Indexing failed:[/red] {e}")
        raise typer.Exit(1)

    if added:
        console.print(f"[green]✓ Indexed {added} courses[/green]")
    else:
        console.print(f"[yellow]Collection already holds {existing} courses, nothing added[/yellow]")


@app.command()
def instructors():
    """
    👩‍🏫 List the instructors and departments found in the schedule.
    """
    try:
        metadata = load_index()
    except CatalogChatError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{len(metadata.instructors)} instructors")
    table.add_column("Instructor")
    table.add_column("Courses", justify="right")
    for name in metadata.instructors:
        if name:
            count = len(metadata.courses_taught_by(name))
        else:
            count = sum(1 for course in metadata.courses if not course.instructor_name)
        table.add_row(name or "(unassigned)", str(count))
    console.print(table)

    console.print(f"\n[bold]Departments:[/bold] {', '.join(metadata.departments)}")


@app.command()
def info():
    """
    ℹ️ Show configuration.
    """
    from catalog_chat import __version__

    settings = get_settings()
    csv_path = settings.get_effective_csv_path()
    store = settings.vector_store

    if store.mode == "persistent":
        location = str(settings.resolve_path(store.persist_dir))
    else:
        location = f"{settings.get_effective_chroma_host()}:{settings.get_effective_chroma_port()}"

    console.print(Panel(
        f"[bold]catalog-chat[/bold] {__version__}\n"
        f"Schedule CSV: {csv_path} [{'✓' if csv_path.exists() else '✗'}]\n"
        f"Vector store: {store.mode} ({location})\n"
        f"Collections: {store.course_collection}, {store.instructor_collection}\n"
        f"Embeddings: {settings.get_effective_embedding_provider()}\n"
        f"Chat model: {settings.get_effective_model()}\n"
        f"API key: {'set' if settings.gemini_api_key else 'missing'}",
        title="ℹ️ Info",
    ))


# ─────────────────────────────────────────────────────────────────────────────
# Entry Point
# ─────────────────────────────────────────────────────────────────────────────


def cli():
    """CLI entry point."""
    app()


if __name__ == "__main__":
    cli()
