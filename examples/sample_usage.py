import sys
import tempfile
from pathlib import Path

# Add the project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rdfdocs.config import get_settings
from rdfdocs.processing.pipeline import ConversionPipeline


SAMPLE_TURTLE = """
@prefix ex: <http://example.org/people/> .
@prefix foaf: <http://xmlns.com/foaf/0.1/> .

ex:Alice a foaf:Person ;
    foaf:name "Alice" ;
    foaf:knows ex:Bob, ex:Carol .

ex:Bob a foaf:Person ;
    foaf:name "Bob"@en .

# Carol is described with a blank node address
ex:Carol foaf:name "Carol" ;
    ex:address [ ex:city "Lisbon" ] .
"""


def main():
    """Run a sample conversion"""
    
    print("=" * 80)
    print("RDF Docs Sample Usage")
    print("=" * 80)
    print()
    
    settings = get_settings()
    pipeline = ConversionPipeline(settings=settings.conversion)
    
    # 1. Build a page document in memory
    print("1. Building a page document...")
    document, diagnostics = pipeline.build_document(SAMPLE_TURTLE)
    print(f"   ✓ {document.triple_count} triples in {len(document.subject_groups)} subject groups")
    for group in document.subject_groups:
        print(f"     - {group.subject_label} ({len(group.triples)} triples)")
        for triple in group.triples:
            print(f"         {triple.predicate} → {triple.object}")
    if diagnostics:
        print(f"   ⚠️  {len(diagnostics)} statement(s) skipped")
    print()
    
    # 2. Convert a directory
    print("2. Converting a directory...")
    with tempfile.TemporaryDirectory() as workdir:
        input_dir = Path(workdir) / "ttl"
        output_dir = Path(workdir) / "html"
        (input_dir / "people").mkdir(parents=True)
        (input_dir / "people" / "friends.ttl").write_text(SAMPLE_TURTLE, encoding="utf-8")
        
        report = pipeline.run(input_dir, output_dir)
        
        print(f"   ✓ Converted {len(report.conversions)} file(s)")
        for entry in report.entries:
            print(f"     - {entry.name} → {entry.path}")
        print(f"   ✓ Index: {report.index_path.name}")
    print()
    
    print("=" * 80)
    print("Done")
    print("=" * 80)


if __name__ == "__main__":
    main()
