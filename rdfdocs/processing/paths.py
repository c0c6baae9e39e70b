from pathlib import Path
from typing import List


def relative_output_path(
    input_path: str | Path,
    input_dir: str | Path,
    extension: str = ".html"
) -> Path:
    """
    Output path of a converted file relative to the output root.
    
    Args:
        input_path: Source file, somewhere under input_dir
        input_dir: Input root
        extension: Suffix of the generated file
    
    Returns:
        Path of the source relative to input_dir with its suffix replaced
    
    Raises:
        ValueError: If input_path is not under input_dir
    """
    relative = Path(input_path).relative_to(Path(input_dir))
    return relative.with_suffix(extension)


def output_path_for(
    input_path: str | Path,
    input_dir: str | Path,
    output_dir: str | Path,
    extension: str = ".html"
) -> Path:
    """Where the converted file is written"""
    return Path(output_dir) / relative_output_path(input_path, input_dir, extension)


def discover_turtle_files(input_dir: str | Path, extension: str = ".ttl") -> List[Path]:
    """Find source files recursively, sorted so runs are reproducible"""
    return sorted(
        path for path in Path(input_dir).rglob(f"*{extension}")
        if path.is_file()
    )
