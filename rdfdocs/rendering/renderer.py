from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateError, select_autoescape

from ..document.models import IndexDocument, PageDocument


PAGE_TEMPLATE = "page"
INDEX_TEMPLATE = "index"

TEMPLATE_FILES = {
    PAGE_TEMPLATE: "page.html",
    INDEX_TEMPLATE: "index.html",
}

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class TemplateSetupError(RuntimeError):
    """A named template could not be loaded"""


class TemplateRenderer:
    """Render page and index documents with named jinja2 templates"""
    
    def __init__(self, template_dir: Optional[str | Path] = None):
        self.template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True
        )
        
        # Load every template up front so a broken one fails before any conversion
        self.templates: Dict[str, Template] = {}
        for name, filename in TEMPLATE_FILES.items():
            try:
                self.templates[name] = self.env.get_template(filename)
            except TemplateError as e:
                raise TemplateSetupError(
                    f"Failed to load template '{name}' from {self.template_dir / filename}: {e}"
                ) from e
    
    def render(self, name: str, context: Dict[str, Any]) -> str:
        """Render a named template"""
        template = self.templates.get(name)
        if template is None:
            raise TemplateSetupError(f"Unknown template: {name}")
        return template.render(**context)
    
    def render_page(self, document: PageDocument) -> str:
        return self.render(PAGE_TEMPLATE, document.context())
    
    def render_index(self, document: IndexDocument) -> str:
        return self.render(INDEX_TEMPLATE, document.context())
