from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class Triple(BaseModel):
    """RDF statement as displayed on a page.
    
    Predicate and object are shortened in place when a namespace matches,
    the subject keeps its full value and gets a separate label.
    """
    subject: str = Field(..., description="Subject IRI or blank node identifier")
    predicate: str = Field(..., description="Predicate IRI, shortened when linked")
    object: str = Field(..., description="Object IRI or literal, shortened when linked")
    
    subject_link: Optional[str] = Field(None, description="Full subject IRI if a prefix matched")
    subject_label: str = Field(default="", description="Subject display text")
    predicate_link: Optional[str] = Field(None, description="Full predicate IRI if a prefix matched")
    object_link: Optional[str] = Field(None, description="Full object IRI if a prefix matched")
    
    def __str__(self) -> str:
        return f"{self.subject} {self.predicate} {self.object}"


class SubjectGroup(BaseModel):
    """All triples sharing one subject"""
    subject: str
    subject_label: str
    subject_link: Optional[str] = None
    triples: List[Triple] = Field(default_factory=list)
    
    def __len__(self) -> int:
        return len(self.triples)


class PageDocument(BaseModel):
    """Render-ready model of one converted file"""
    title: str = Field(default="Definitions", description="Page title")
    subject_groups: List[SubjectGroup] = Field(default_factory=list)
    
    @property
    def triple_count(self) -> int:
        return sum(len(group) for group in self.subject_groups)
    
    def context(self) -> Dict[str, Any]:
        """Template context for the page template"""
        return {"title": self.title, "subject_groups": self.subject_groups}


class IndexEntry(BaseModel):
    """Index record of one converted file"""
    path: str = Field(..., description="Output-relative path of the generated page")
    name: str = Field(..., description="Base name of the source file")


class IndexDocument(BaseModel):
    """Render-ready model of the index page"""
    title: str = Field(default="Index of RDF Files", description="Index page title")
    entries: List[IndexEntry] = Field(default_factory=list)
    
    def context(self) -> Dict[str, Any]:
        """Template context for the index template"""
        return {"title": self.title, "entries": self.entries}
