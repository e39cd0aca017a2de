import argparse
import logging
import sys

from spindle_generator.colored_logging import (
    get_colored_logger,
    log_highlight,
    log_progress,
    log_section,
    log_success,
    setup_colored_logging,
)
from spindle_generator.config_validation import load_config
from spindle_generator.domain.entity_index import EntityMetadataIndex
from spindle_generator.exceptions import SpindleGeneratorError
from spindle_generator.generation import ArtifactGenerator, ArtifactKind, GenerationOptions
from spindle_generator.health import MetadataHealthChecker
from spindle_generator.introspection_django import DjangoDatabase
from spindle_generator.output import FileSystemOutput, InMemoryOutput
from spindle_generator.rendering import create_renderer

# Note: Colored logging will be configured after parsing args
logger = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spindle-generator",
        description="Generate layered application source code from entity metadata stored in a database.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML configuration file (containing the Django DATABASES dict).",
    )
    parser.add_argument(
        "-o",
        "--output-folder",
        dest="output_folder",
        help="Root folder of generated output. Overrides config file setting.",
    )
    parser.add_argument(
        "-t",
        "--template-folder",
        dest="template_folder",
        help="Folder holding the artifact templates. Overrides config file setting.",
    )
    parser.add_argument(
        "--kind",
        dest="kinds",
        action="append",
        choices=[kind.value for kind in ArtifactKind],
        help="Artifact kind to generate; repeat for several. Defaults to the full sequence.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Render everything but write nothing; list the paths that would be written.",
    )
    parser.add_argument(
        "--check-metadata",
        action="store_true",
        help="Check the metadata table against the live schema and exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging for the generator tool.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    return parser


def check_metadata(database, index: EntityMetadataIndex) -> int:
    log_section(logger, "Metadata Health Check")
    result = MetadataHealthChecker(database, index).run()

    for warning in result.warnings:
        logger.warning(warning)
    for error in result.errors:
        logger.error(error)

    if result.is_valid:
        log_success(logger, f"Metadata is healthy ({len(result.warnings)} warning(s)).")
        return 0
    logger.error(f"Metadata check found {len(result.errors)} error(s).")
    return 1


def main(argv=None):
    # --- Argument Parsing ---
    args = build_parser().parse_args(argv)

    # --- Logging Setup ---
    use_colors = not args.no_color
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=use_colors)

    global logger
    logger = get_colored_logger(__name__)

    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    # --- Main Execution Pipeline ---
    try:
        # 1. Load Configuration
        log_progress(logger, "Loading configuration...")
        config = load_config(args.config, args)
        log_success(logger, "Configuration loaded and validated successfully.")
        logger.debug(f"Effective configuration loaded: {config}")

        # 2. Connect to the metadata database
        log_progress(logger, "Configuring Django database connections...")
        database = DjangoDatabase.from_config(config)

        # 3. Load entities
        output = InMemoryOutput() if args.dry_run else FileSystemOutput(config.output_folder)
        generator = ArtifactGenerator(
            GenerationOptions.from_config(config),
            database,
            create_renderer(config),
            output,
        )
        index = generator.initialize()

        if args.check_metadata:
            sys.exit(check_metadata(database, index))

        # 4. Generate
        kinds = [ArtifactKind(kind) for kind in args.kinds] if args.kinds else None
        report = generator.run(kinds)
        report.raise_if_failed()

        # --- Success ---
        log_section(logger, "COMPLETION")
        if args.dry_run:
            log_highlight(logger, f"Dry run: {len(output.paths)} file(s) would be written:")
            for path in output.paths:
                logger.info(f"   {path}")
        else:
            log_success(logger, f"Generated {len(report.written)} file(s) in {config.output_folder}")

    # --- Error Handling ---
    except SpindleGeneratorError as e:
        logger.error(f"{type(e).__name__}: {e}", exc_info=args.verbose)
        sys.exit(1)
    except RuntimeError as e:
        logger.error(f"Runtime Error: {e}", exc_info=args.verbose)
        sys.exit(1)
    except ImportError as e:
        logger.error(
            f"Import Error: {e}. Ensure Django and the necessary database drivers are installed.",
            exc_info=args.verbose,
        )
        logger.error("Example: pip install 'spindle-generator[postgres]' (for PostgreSQL)")
        sys.exit(1)
    except Exception as e:
        logger.error(f"An unexpected error occurred during generation: {e}", exc_info=True)
        sys.exit(1)


# --- Script Entry Point ---
if __name__ == "__main__":
    main()
