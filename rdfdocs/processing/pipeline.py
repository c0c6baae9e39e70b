import sys
from pathlib import Path
from typing import List, Optional, Tuple

from jinja2 import TemplateError
from pydantic import BaseModel, Field

from ..config import ConversionSettings, get_settings
from ..document.builder import DocumentBuilder
from ..document.models import IndexDocument, IndexEntry, PageDocument
from ..ingest.turtle import ParseDiagnostic, TurtleIngest
from ..rendering.renderer import TemplateRenderer
from .paths import discover_turtle_files, relative_output_path


class ConversionError(Exception):
    """Conversion of a single file failed"""
    
    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message


class FileConversion(BaseModel):
    """Result of converting one file"""
    source: Path
    output_path: Path
    entry: IndexEntry
    triple_count: int = 0
    group_count: int = 0
    diagnostics: List[ParseDiagnostic] = Field(default_factory=list)


class FileFailure(BaseModel):
    """A file that could not be converted"""
    source: Path
    message: str


class RunReport(BaseModel):
    """Accumulated outcome of a conversion run"""
    entries: List[IndexEntry] = Field(default_factory=list)
    conversions: List[FileConversion] = Field(default_factory=list)
    failures: List[FileFailure] = Field(default_factory=list)
    index_path: Optional[Path] = None
    
    def record(self, conversion: FileConversion) -> None:
        self.conversions.append(conversion)
        self.entries.append(conversion.entry)
    
    def record_failure(self, error: ConversionError) -> None:
        self.failures.append(FileFailure(source=error.path, message=error.message))
    
    @property
    def triple_count(self) -> int:
        return sum(c.triple_count for c in self.conversions)


class ConversionReporter:
    """Progress output of a conversion run"""
    
    def file_started(self, path: Path) -> None:
        print(f"Converting file: {path}")
    
    def file_converted(self, conversion: FileConversion) -> None:
        print(f"Successfully converted {conversion.source}")
        for diagnostic in conversion.diagnostics:
            print(f"  Skipped statement at line {diagnostic.line}: {diagnostic.message}")
    
    def file_failed(self, path: Path, error: ConversionError) -> None:
        print(f"Error converting file {path}: {error.message}", file=sys.stderr)


class ConversionPipeline:
    """Convert a tree of Turtle files into HTML pages and an index"""
    
    def __init__(
        self,
        renderer: Optional[TemplateRenderer] = None,
        settings: Optional[ConversionSettings] = None
    ):
        app_settings = get_settings()
        
        self.settings = settings or app_settings.conversion
        
        if renderer is None:
            renderer = TemplateRenderer(app_settings.rendering.template_dir)
        self.renderer = renderer
    
    def build_document(self, text: str) -> Tuple[PageDocument, List[ParseDiagnostic]]:
        """
        Turn Turtle text into a page document.
        
        Each statement's triples are linked with the prefixes declared up to
        that statement.
        
        Returns:
            The page document and the statements that were skipped
        
        Raises:
            TurtleSyntaxError: On a malformed statement in strict mode
        """
        ingest = TurtleIngest(
            text,
            base_iri=self.settings.base_iri,
            strict=self.settings.strict_parsing
        )
        builder = DocumentBuilder(title=self.settings.page_title)
        
        for step in ingest:
            builder.add_step(step)
        
        return builder.build(), ingest.diagnostics
    
    def convert_file(
        self,
        input_path: str | Path,
        input_dir: str | Path,
        output_dir: str | Path
    ) -> FileConversion:
        """
        Convert one file and write its page.
        
        Raises:
            ConversionError: If reading, parsing, rendering or writing fails
        """
        input_path = Path(input_path)
        
        try:
            text = input_path.read_text(encoding=self.settings.encoding)
            document, diagnostics = self.build_document(text)
            html = self.renderer.render_page(document)
            
            relative = relative_output_path(input_path, input_dir, self.settings.output_extension)
            output_path = Path(output_dir) / relative
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(html, encoding=self.settings.encoding)
        except (OSError, ValueError, TemplateError) as e:
            raise ConversionError(input_path, str(e)) from e
        
        return FileConversion(
            source=input_path,
            output_path=output_path,
            entry=IndexEntry(path=relative.as_posix(), name=input_path.name),
            triple_count=document.triple_count,
            group_count=len(document.subject_groups),
            diagnostics=diagnostics
        )
    
    def generate_index(self, output_dir: str | Path, entries: List[IndexEntry]) -> Path:
        """Write the index page; errors propagate"""
        document = IndexDocument(title=self.settings.index_title, entries=entries)
        html = self.renderer.render_index(document)
        
        index_path = Path(output_dir) / self.settings.index_filename
        index_path.write_text(html, encoding=self.settings.encoding)
        
        return index_path
    
    def run(
        self,
        input_dir: str | Path,
        output_dir: str | Path,
        reporter: Optional[ConversionReporter] = None
    ) -> RunReport:
        """
        Convert every Turtle file under input_dir.
        
        A file that fails is reported and left out of the index; failing to
        create the output directory or to write the index aborts the run.
        """
        reporter = reporter or ConversionReporter()
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        
        report = RunReport()
        
        for input_path in discover_turtle_files(input_dir, self.settings.input_extension):
            reporter.file_started(input_path)
            try:
                conversion = self.convert_file(input_path, input_dir, output_dir)
            except ConversionError as e:
                report.record_failure(e)
                reporter.file_failed(input_path, e)
                continue
            
            report.record(conversion)
            reporter.file_converted(conversion)
        
        report.index_path = self.generate_index(output_dir, report.entries)
        
        return report
