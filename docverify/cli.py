"""Command-line interface for identity document verification.

Provides subcommands for analyzing a single document photo and for
processing folders of photos with CSV export of the verdicts.
"""

import argparse
import csv
import json
import sys
from pathlib import Path

from docverify.decision.orchestrator import HybridDocumentVerifier
from docverify.utils.config import load_config
from docverify.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.tiff", "*.tif", "*.bmp", "*.webp")
_CSV_COLUMNS = [
    "filename",
    "provider",
    "document_type",
    "confidence",
    "quality_score",
    "is_valid_document",
    "requires_manual_review",
    "manual_review_priority",
    "suspicious_indicators",
    "processing_time_ms",
    "error",
]


def _find_documents(input_dir: Path) -> list[Path]:
    """Find all supported image files in a directory.

    Args:
        input_dir: Directory to scan for documents.

    Returns:
        Sorted list of image file paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def _build_verifier(config_path: Path | None) -> HybridDocumentVerifier:
    config = load_config(config_path)
    verifier = HybridDocumentVerifier(config)
    verifier.initialize()
    return verifier


def analyze_single(
    file_path: Path, verifier: HybridDocumentVerifier
) -> dict[str, object]:
    """Analyze one document photo.

    Args:
        file_path: Path to the image file.
        verifier: Verifier instance to use.

    Returns:
        The verdict as a JSON-serializable dictionary.
    """
    result = verifier.analyze_document(
        file_path.read_bytes(), {"originalName": file_path.name}
    )
    return result.to_dict()


def _csv_row(filename: str, verdict: dict[str, object]) -> dict[str, object]:
    indicators = verdict.get("suspiciousIndicators") or []
    return {
        "filename": filename,
        "provider": verdict.get("provider"),
        "document_type": verdict.get("documentType"),
        "confidence": round(float(verdict.get("confidence", 0.0)), 3),
        "quality_score": round(float(verdict.get("qualityScore", 0.0)), 3),
        "is_valid_document": verdict.get("isValidDocument", False),
        "requires_manual_review": verdict.get("requiresManualReview", False),
        "manual_review_priority": verdict.get("manualReviewPriority"),
        "suspicious_indicators": len(indicators),
        "processing_time_ms": verdict.get("processingTime"),
        "error": verdict.get("error"),
    }


def process_folder(
    input_dir: Path,
    output_csv: Path,
    config_path: Path | None = None,
    verbose: bool = False,
) -> dict[str, object]:
    """Analyze all document photos in a folder and export verdicts to CSV.

    Args:
        input_dir: Directory containing image files.
        output_csv: Path for the output CSV file.
        config_path: Optional configuration file.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with counts and the verifier's performance stats.
    """
    files = _find_documents(input_dir)
    if not files:
        logger.warning("No documents found in %s", input_dir)
        return {"total": 0, "approved": 0, "manual_review": 0, "failed": 0}

    verifier = _build_verifier(config_path)
    logger.info("Found %d documents to analyze", len(files))

    rows: list[dict[str, object]] = []
    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Analyzing [{i}/{len(files)}]: {file_path.name}")
        rows.append(_csv_row(file_path.name, analyze_single(file_path, verifier)))

    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary: dict[str, object] = {
        "total": len(files),
        "approved": sum(1 for r in rows if r["provider"] == "autonomous"),
        "manual_review": sum(1 for r in rows if r["requires_manual_review"]),
        "failed": sum(1 for r in rows if r["provider"] == "error"),
        "stats": verifier.get_performance_stats(),
    }
    _print_summary(summary, output_csv)
    return summary


def _write_csv(rows: list[dict[str, object]], output_path: Path) -> None:
    """Write verdict rows to a CSV file.

    Args:
        rows: One dictionary per analyzed file.
        output_path: Path for the output CSV file.
    """
    if not rows:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, object], output_csv: Path) -> None:
    """Print batch analysis summary to stdout."""
    print(f"\n{'=' * 50}")
    print("Batch Verification Complete")
    print(f"{'=' * 50}")
    print(f"Total:         {summary['total']}")
    print(f"Auto-approved: {summary['approved']}")
    print(f"Manual review: {summary['manual_review']}")
    print(f"Errors:        {summary['failed']}")
    stats = summary.get("stats")
    if isinstance(stats, dict):
        print(f"Success rate:  {stats['autonomousSuccessRate']}")
    print(f"Output:        {output_csv}")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Identity document verification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--config", type=Path, help="Configuration YAML file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    single_parser = subparsers.add_parser("analyze", help="Analyze a single document")
    single_parser.add_argument("file", type=Path, help="Document image to analyze")
    single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Analyze a folder of documents")
    batch_parser.add_argument(
        "input_dir", type=Path, help="Input directory with document images"
    )
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("verdicts.csv"),
        help="Output CSV file (default: verdicts.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    args = parser.parse_args(argv)

    setup_logging()

    if args.command == "analyze":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        verdict = analyze_single(args.file, _build_verifier(args.config))
        output_str = json.dumps(verdict, indent=2, ensure_ascii=False)
        if args.output:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(output_str, encoding="utf-8")
            print(f"Output written to {args.output}")
        else:
            print(output_str)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, args.config, args.verbose)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
