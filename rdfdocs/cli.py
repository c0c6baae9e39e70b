import click
import sys
import traceback
from jinja2 import TemplateError
from pathlib import Path
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import get_settings
from .ingest.turtle import TurtleSyntaxError
from .processing.pipeline import ConversionError, ConversionPipeline, ConversionReporter, FileConversion
from .rendering.renderer import TemplateRenderer, TemplateSetupError

console = Console()
error_console = Console(stderr=True)


class ConsoleReporter(ConversionReporter):
    """Report conversion progress on the rich consoles"""

    def file_started(self, path: Path) -> None:
        console.print(f"Converting file: {escape(str(path))}", style="dim")

    def file_converted(self, conversion: FileConversion) -> None:
        console.print(
            f"✓ Converted {escape(str(conversion.source))} → {escape(conversion.entry.path)} "
            f"({conversion.triple_count} triples, {conversion.group_count} subjects)",
            style="green"
        )
        for diagnostic in conversion.diagnostics:
            console.print(
                f"  ⚠️  Skipped statement at line {diagnostic.line}: {escape(diagnostic.message)}",
                style="yellow"
            )

    def file_failed(self, path: Path, error: ConversionError) -> None:
        error_console.print(f"✗ Error converting file {escape(str(path))}: {escape(error.message)}", style="red")


def _conversion_settings(strict: bool, base_iri: str | None):
    """Conversion settings with command line overrides applied"""
    settings = get_settings().conversion
    updates = {}
    if strict:
        updates["strict_parsing"] = True
    if base_iri:
        updates["base_iri"] = base_iri
    return settings.model_copy(update=updates) if updates else settings


@click.group()
@click.version_option("0.1.0", prog_name="rdfdocs")
def cli():
    """RDF Docs CLI - Convert RDF Turtle files to browseable HTML"""
    pass


@cli.command()
@click.option('-i', '--input', 'input_dir', required=True,
              type=click.Path(exists=True, file_okay=False, path_type=Path),
              help='Sets the input directory')
@click.option('-o', '--output', 'output_dir', required=True,
              type=click.Path(file_okay=False, path_type=Path),
              help='Sets the output directory')
@click.option('--strict', is_flag=True, help='Fail a file on its first malformed statement')
@click.option('--base-iri', default=None, help='Base IRI for relative IRIs')
@click.option('--template-dir', default=None,
              type=click.Path(exists=True, file_okay=False, path_type=Path),
              help='Directory with page.html and index.html')
def convert(input_dir: Path, output_dir: Path, strict: bool, base_iri: str | None, template_dir: Path | None):
    """Convert every Turtle file under INPUT_DIR to HTML"""
    settings = get_settings()

    try:
        renderer = TemplateRenderer(template_dir or settings.rendering.template_dir)
        pipeline = ConversionPipeline(renderer, _conversion_settings(strict, base_iri))
        report = pipeline.run(input_dir, output_dir, reporter=ConsoleReporter())
    except (TemplateSetupError, OSError) as e:
        error_console.print(f"✗ Conversion failed: {escape(str(e))}", style="red")
        if settings.log_level == "DEBUG":
            traceback.print_exc()
        sys.exit(1)
    except TemplateError as e:
        error_console.print(f"✗ Index generation failed: {escape(str(e))}", style="red")
        if settings.log_level == "DEBUG":
            traceback.print_exc()
        sys.exit(1)

    # Summary
    table = Table(title="Conversion Summary")
    table.add_column("Converted", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Triples", justify="right")
    table.add_column("Skipped statements", justify="right", style="yellow")
    table.add_row(
        str(len(report.conversions)),
        str(len(report.failures)),
        str(report.triple_count),
        str(sum(len(c.diagnostics) for c in report.conversions))
    )
    console.print(table)
    console.print(f"✓ Index written to {report.index_path}", style="green")


@cli.command()
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--strict', is_flag=True, help='Fail on the first malformed statement')
@click.option('--base-iri', default=None, help='Base IRI for relative IRIs')
def inspect(file_path: Path, strict: bool, base_iri: str | None):
    """Show the subject groups of one Turtle file without writing anything"""
    settings = get_settings()
    conversion_settings = _conversion_settings(strict, base_iri)

    try:
        pipeline = ConversionPipeline(
            TemplateRenderer(settings.rendering.template_dir),
            conversion_settings
        )
        text = file_path.read_text(encoding=conversion_settings.encoding)
        document, diagnostics = pipeline.build_document(text)
    except (TemplateSetupError, TurtleSyntaxError, OSError, ValueError) as e:
        error_console.print(f"✗ Failed to inspect {escape(str(file_path))}: {escape(str(e))}", style="red")
        sys.exit(1)

    if not document.subject_groups:
        console.print(f"No statements found in {file_path}", style="yellow")
    else:
        table = Table(title=f"{document.title}: {file_path.name}")
        table.add_column("Subject", style="cyan")
        table.add_column("Predicate")
        table.add_column("Object")

        for group in document.subject_groups:
            for i, triple in enumerate(group.triples):
                table.add_row(
                    escape(group.subject_label) if i == 0 else "",
                    escape(triple.predicate),
                    escape(triple.object)
                )

        console.print(table)
        console.print(
            f"\n{document.triple_count} triples in {len(document.subject_groups)} subject groups",
            style="dim"
        )

    if diagnostics:
        console.print("\n⚠️  Skipped statements:", style="yellow")
        for diagnostic in diagnostics:
            console.print(f"  - line {diagnostic.line}: {escape(diagnostic.statement)}", style="yellow")
            console.print(f"    {escape(diagnostic.message)}", style="dim")


@cli.command()
def info():
    """Show the effective configuration"""
    settings = get_settings()
    conversion = settings.conversion

    console.print("\n📊 RDF Docs Configuration\n", style="bold")

    console.print("📄 Conversion:", style="bold cyan")
    console.print(f"  Page title: {conversion.page_title}")
    console.print(f"  Index title: {conversion.index_title}")
    console.print(f"  Extensions: {conversion.input_extension} → {conversion.output_extension}")
    console.print(f"  Index file: {conversion.index_filename}")
    console.print(f"  Encoding: {conversion.encoding}")
    console.print(f"  Strict parsing: {conversion.strict_parsing}")
    console.print(f"  Base IRI: {conversion.base_iri or '(none)'}")

    console.print("\n🎨 Templates:", style="bold cyan")
    template_dir = settings.rendering.template_dir
    console.print(f"  Directory: {template_dir or '(bundled)'}")

    console.print(f"\nLog level: {settings.log_level}")
    console.print()


if __name__ == '__main__':
    cli()
