"""
Command-line interface for invoice processing.

Usage:
    python -m invoice_harvester.cli.harvester_cli process --input <dir> --output <file.csv> [options]
    python -m invoice_harvester.cli.harvester_cli templates
"""

import argparse
import sys
from pathlib import Path

from invoice_harvester.config import Settings
from invoice_harvester.core.models import UploadedFile
from invoice_harvester.extraction import SimulatedExtractor
from invoice_harvester.observability.logger import get_logger, setup_logger, ROOT_LOGGER_NAME
from invoice_harvester.observability.metrics import generate_metrics
from invoice_harvester.workspace import Workspace


logger = get_logger(__name__)


def collect_files(input_path: Path) -> list[UploadedFile]:
    """PDF files of a directory (sorted by name), or the single given file."""
    if input_path.is_dir():
        paths = sorted(p for p in input_path.iterdir() if p.is_file() and p.suffix.lower() == ".pdf")
    else:
        paths = [input_path]

    return [
        UploadedFile(file_name=p.name, content=p.read_bytes(), source_url=p.resolve().as_uri())
        for p in paths
    ]


def build_workspace(args) -> Workspace:
    """Workspace from .env and CLI overrides; logging follows the same settings."""
    settings = Settings.from_env(args.env_file)
    if args.config:
        settings = settings.model_copy(update={"config_path": Path(args.config)})
    setup_logger(ROOT_LOGGER_NAME, level=args.log_level or settings.log_level, format_type=settings.log_format)
    extractor = SimulatedExtractor() if getattr(args, "simulate", False) else None
    return Workspace.from_settings(settings, extractor=extractor)


def find_template_id(workspace: Workspace, name: str, for_upload: bool) -> str | None:
    template = workspace.templates.find_by_name(name, for_upload=for_upload)
    if template is None:
        template = workspace.templates.get(name)
    if template is None or template.for_upload != for_upload:
        return None
    return template.id


def process_command(args) -> int:
    """
    Execute invoice processing command.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input path not found: {args.input}")
        return 1

    files = collect_files(input_path)
    if not files:
        logger.error(f"No PDF files found in {args.input}")
        return 1

    with build_workspace(args) as workspace:
        return run_process(workspace, args, files)


def run_process(workspace: Workspace, args, files: list[UploadedFile]) -> int:
    if args.template:
        template_id = find_template_id(workspace, args.template, for_upload=True)
        if template_id is None:
            logger.error(f"Upload template not found: {args.template}")
            return 1
        workspace.select_upload_template(template_id)

    if args.mode == "line_items":
        if not args.export_template:
            logger.error("--export-template is required with --mode line_items")
            return 1
        export_template_id = find_template_id(workspace, args.export_template, for_upload=False)
        if export_template_id is None:
            logger.error(f"Export template not found: {args.export_template}")
            return 1
        outcome = workspace.set_export_mode("line_items", export_template_id)
        if not outcome.ok:
            logger.error(outcome.message)
            return 1

    upload = workspace.upload(files)
    logger.info(upload.message)

    counts = workspace.dashboard.counts()
    logger.info("=" * 60)
    logger.info("PROCESSING COMPLETE")
    logger.info("=" * 60)
    logger.info(f"Processed: {counts.processed}")
    logger.info(f"Needs validation: {counts.needs_validation}")
    logger.info(f"Errors: {counts.error}")
    logger.info("=" * 60)

    export = workspace.export()
    if not export.ok:
        logger.error(export.message)
        return 1

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(export.data, encoding="utf-8")
    logger.info(f"CSV written to {output_path}")

    if args.metrics_out:
        metrics_path = Path(args.metrics_out)
        metrics_path.parent.mkdir(parents=True, exist_ok=True)
        metrics_path.write_bytes(generate_metrics())
        logger.info(f"Metrics written to {metrics_path}")
    return 0


def templates_command(args) -> int:
    """List upload and export templates."""
    with build_workspace(args) as workspace:
        for template in workspace.templates.list():
            role = "upload" if template.for_upload else "export"
            flag = " [default]" if template.is_default else ""
            print(f"{template.id}\t{role}\t{template.name}{flag}\t{', '.join(template.columns)}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Invoice extraction and CSV export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Extract every PDF in a folder with the simulated extractor
  python -m invoice_harvester.cli.harvester_cli process --input invoices/ --output out.csv --simulate

  # Guide extraction with an upload template
  python -m invoice_harvester.cli.harvester_cli process --input invoices/ --output out.csv \\
      --template "Comprehensive Details (Upload)"

  # One CSV row per product line
  python -m invoice_harvester.cli.harvester_cli process --input invoices/ --output lines.csv \\
      --mode line_items --export-template "ERPNext Article Default (Export)"

  # List templates
  python -m invoice_harvester.cli.harvester_cli templates
        """
    )
    parser.add_argument("--config", help="Path to harvester YAML config (overrides HARVESTER_CONFIG)")
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument("--log-level", help="Log level (overrides LOG_LEVEL)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser("process", help="Extract PDFs and export CSV")
    process_parser.add_argument(
        "--input",
        required=True,
        help="PDF file or directory of PDF files"
    )
    process_parser.add_argument(
        "--output",
        required=True,
        help="Path of the CSV file to write"
    )
    process_parser.add_argument(
        "--template",
        help="Upload template name or id guiding product extraction"
    )
    process_parser.add_argument(
        "--mode",
        default="summary",
        choices=["summary", "line_items"],
        help="CSV layout (default: summary)"
    )
    process_parser.add_argument(
        "--export-template",
        help="Export template name or id (required for line_items)"
    )
    process_parser.add_argument(
        "--simulate",
        action="store_true",
        help="Use the simulated extractor instead of the prompt service"
    )
    process_parser.add_argument(
        "--metrics-out",
        help="Write Prometheus metrics of the run to this file"
    )

    subparsers.add_parser("templates", help="List templates")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "process":
        return process_command(args)
    return templates_command(args)


if __name__ == "__main__":
    sys.exit(main())
