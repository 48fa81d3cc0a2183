"""Command-line interface for document ingestion and batch CSV summaries.

Provides subcommands for processing a single document into the canonical
schema as JSON, and for processing folders of documents with a CSV
summary of what was extracted from each.
"""

import argparse
import asyncio
import csv
import json
import sys
import time
from dataclasses import asdict
from pathlib import Path
from typing import Any

from src.pipeline import DocumentPipeline, PipelineResult
from src.utils.config import load_config
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.tiff", "*.tif", "*.bmp")
_CSV_COLUMNS = [
    "filename",
    "status",
    "people",
    "entities",
    "locations",
    "person_annotations",
    "processing_time_s",
    "error",
]


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all supported image files in a directory.

    Args:
        input_dir: Directory to scan for documents.

    Returns:
        Sorted list of document file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def result_to_dict(result: PipelineResult) -> dict[str, Any]:
    """Convert a pipeline result into JSON-serializable primitives."""
    return {
        "extracted_text": result.extracted_text,
        "final_schema": (
            asdict(result.final_schema) if result.final_schema is not None else None
        ),
        "parse_result": (
            result.parse_result.model_dump() if result.parse_result is not None else None
        ),
        "person_annotations": [asdict(a) for a in result.person_annotations],
    }


def _summarize(filename: str, result: PipelineResult) -> dict[str, object]:
    schema = result.final_schema
    return {
        "filename": filename,
        "status": "success" if schema is not None else "no_text",
        "people": len(schema.people) if schema else 0,
        "entities": len(schema.entities) if schema else 0,
        "locations": len(schema.locations) if schema else 0,
        "person_annotations": len(result.person_annotations),
        "error": None,
    }


def extract_single(
    file_path: Path, use_local_nlp: bool | None = None
) -> dict[str, Any]:
    """Process a single document and return the result as primitives.

    Args:
        file_path: Path to the image file.
        use_local_nlp: Override for the configured local NLP pass.

    Returns:
        Dictionary with extracted text, final schema, parse result and
        person annotations.
    """
    output = result_to_dict(asyncio.run(_extract(file_path, use_local_nlp)))
    output["filename"] = file_path.name
    return output


async def _extract(file_path: Path, use_local_nlp: bool | None) -> PipelineResult:
    pipeline = DocumentPipeline(load_config())
    try:
        return await pipeline.process(
            file_path.read_bytes(), file_path.name, use_local_nlp=use_local_nlp
        )
    finally:
        await pipeline.aclose()


async def _process_files(
    files: list[Path], use_local_nlp: bool | None, verbose: bool
) -> list[dict[str, object]]:
    """Run every file through one pipeline, recording failures per file."""
    pipeline = DocumentPipeline(load_config())
    rows: list[dict[str, object]] = []
    try:
        for i, file_path in enumerate(files, 1):
            if verbose:
                print(f"Processing [{i}/{len(files)}]: {file_path.name}")

            start_time = time.time()
            try:
                result = await pipeline.process(
                    file_path.read_bytes(),
                    file_path.name,
                    use_local_nlp=use_local_nlp,
                )
                row = _summarize(file_path.name, result)
            except Exception as exc:
                logger.error("Failed to process %s: %s", file_path.name, exc)
                row = {"filename": file_path.name, "status": "failed", "error": str(exc)}
            row["processing_time_s"] = round(time.time() - start_time, 2)
            rows.append(row)
    finally:
        await pipeline.aclose()
    return rows


def process_folder(
    input_dir: Path,
    output_csv: Path,
    use_local_nlp: bool | None = None,
    verbose: bool = False,
) -> dict[str, int]:
    """Process all documents in a folder and write a CSV summary.

    Each document is processed independently; one failure does not stop
    the batch.

    Args:
        input_dir: Directory containing document images.
        output_csv: Path for the output CSV file.
        use_local_nlp: Override for the configured local NLP pass.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    files = _find_documents(input_dir)
    if not files:
        logger.warning("No documents found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d documents to process", len(files))

    rows = asyncio.run(_process_files(files, use_local_nlp, verbose))
    failed = sum(1 for row in rows if row["status"] == "failed")

    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": len(files) - failed, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(rows: list[dict[str, object]], output_path: Path) -> None:
    if not rows:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def _nlp_override(args: argparse.Namespace) -> bool | None:
    if args.local_nlp:
        return True
    if args.no_local_nlp:
        return False
    return None


def _add_nlp_flags(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--local-nlp", action="store_true", help="Force the local NLP pass on"
    )
    group.add_argument(
        "--no-local-nlp", action="store_true", help="Force the local NLP pass off"
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Document Artifact Ingestion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    batch_parser = subparsers.add_parser("batch", help="Process a folder of documents")
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with document images"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )
    _add_nlp_flags(batch_parser)

    single_parser = subparsers.add_parser("extract", help="Process a single document")
    single_parser.add_argument("file", type=Path, help="Document image to process")
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")
    _add_nlp_flags(single_parser)

    args = parser.parse_args(argv)

    setup_logging(load_config().log_level)

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(
            args.input_dir,
            args.output,
            _nlp_override(args),
            args.verbose,
        )
    elif args.command == "extract":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        result = extract_single(args.file, _nlp_override(args))
        output_str = json.dumps(result, indent=2)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str)
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
