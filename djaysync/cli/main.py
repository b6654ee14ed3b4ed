"""
djay-sync command-line interface

Copies djay tempo and key values into a Rekordbox XML collection or into
the tags of a folder of audio files.
"""

import argparse
import sys
import os
import json
import time
from typing import Any, Dict, List, Tuple

from tqdm import tqdm

from ..core.engine import SyncEngine
from ..core.exceptions import DjaySyncError, ConfigurationError, TagWriteError
from ..core.models import BatchResult, FieldSelection, SyncOptions
from ..library.file_tags import AudioFileTrack, scan_folder
from ..library.rekordbox import RekordboxLibrary
from ..tables import load_tables
from ..utils.logging_config import setup_logging, get_logger
from .config import SyncConfig


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser with all options"""

    parser = argparse.ArgumentParser(
        prog='djay-sync',
        description="djay-sync - Copy djay tempo and key analysis into your music library",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s rekordbox.xml --auto cached.json                   # Fill empty BPM and key fields
  %(prog)s rekordbox.xml --auto cached.json --manual presets.json --overwrite
  %(prog)s ~/Music/Techno --auto cached.json --fields key     # Write keys into file tags
  %(prog)s rekordbox.xml --auto cached.json --dry-run --report report.json
        """
    )

    # Positional argument
    parser.add_argument('library',
                        help='Rekordbox XML collection or folder of audio files')

    # Tables
    table_group = parser.add_argument_group('djay Databases')
    table_group.add_argument('--auto', dest='auto_path', metavar='FILE',
                             help='JSON export of djay automatic analysis (cached data)')
    table_group.add_argument('--manual', dest='manual_path', metavar='FILE',
                             help='JSON export of djay manual corrections (preset library)')

    # Sync options
    sync_group = parser.add_argument_group('Sync Options')
    sync_group.add_argument('--fields', choices=[f.value for f in FieldSelection],
                            help='Fields to write (default: both)')
    sync_group.add_argument('--overwrite', action='store_true', dest='overwrite_existing', default=None,
                            help='Replace existing tempo and key values')
    sync_group.add_argument('--keep-existing', action='store_false', dest='overwrite_existing', default=None,
                            help='Only fill empty values (default)')
    sync_group.add_argument('--dry-run', action='store_true', default=None,
                            help='Preview changes without modifying anything')
    sync_group.add_argument('--output', dest='output_path', metavar='FILE',
                            help='Write the updated Rekordbox XML here instead of in place')

    # Reporting
    report_group = parser.add_argument_group('Reporting Options')
    report_group.add_argument('--report', dest='report_path', metavar='FILE',
                              help='Write a JSON report of every track outcome')

    # Logging options
    logging_group = parser.add_argument_group('Logging Options')
    logging_group.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                               help='Console logging level (default: INFO)')
    logging_group.add_argument('--log-dir', metavar='DIR',
                               help='Directory for log files (default: ~/.djay_sync/logs)')
    logging_group.add_argument('--no-console-log', action='store_true',
                               help='Disable console logging (file logging only)')

    # Utility options
    utility_group = parser.add_argument_group('Utility Options')
    utility_group.add_argument('--config', metavar='FILE',
                               help='Load configuration from JSON file')
    utility_group.add_argument('--save-config', action='store_true',
                               help='Save the effective settings to the config file')
    utility_group.add_argument('--no-progress', action='store_true',
                               help='Hide the progress bar')
    utility_group.add_argument('--verbose', '-v', action='store_true',
                               help='Verbose output')
    utility_group.add_argument('--version', action='version', version='djay-sync 1.0.0')

    return parser


def apply_cli_overrides(args, config: Dict[str, Any]) -> Dict[str, Any]:
    """CLI args override config, config overrides defaults"""
    overrides = {
        ('sync', 'fields'): args.fields,
        ('sync', 'overwrite_existing'): args.overwrite_existing,
        ('sync', 'dry_run'): args.dry_run,
        ('tables', 'auto_path'): args.auto_path,
        ('tables', 'manual_path'): args.manual_path,
        ('library', 'output_path'): args.output_path,
        ('logging', 'console_level'): args.log_level,
        ('logging', 'log_dir'): args.log_dir,
    }
    for (section, key), value in overrides.items():
        if value is not None:
            config.setdefault(section, {})[key] = value

    if args.no_console_log:
        config['logging']['enable_console'] = False
    if args.no_progress:
        config['ui']['progress_bars'] = False

    return config


def open_library(path: str) -> Tuple[Any, List]:
    """
    Open a library and return (library, tracks)

    The library is a RekordboxLibrary for XML files and None for a folder
    of audio files, whose tracks save themselves.
    """
    if os.path.isdir(path):
        return None, list(scan_folder(path))

    library = RekordboxLibrary.load(path)
    return library, library.file_tracks()


def save_changes(library, tracks: List, output_path: str = None) -> int:
    """
    Persist tempo and grouping changes

    Returns:
        Number of audio files that could not be written
    """
    if library is not None:
        library.save(output_path)
        return 0

    logger = get_logger('cli')
    failures = 0
    for track in tracks:
        if not isinstance(track, AudioFileTrack) or not track.has_changes:
            continue
        try:
            track.save()
        except TagWriteError as e:
            failures += 1
            logger.error(str(e))
    return failures


def write_report(batch: BatchResult, report_path: str, options: SyncOptions) -> str:
    """Write a JSON report of the batch"""
    report = {
        'generated': time.strftime('%Y-%m-%d %H:%M:%S'),
        'options': options.to_dict(),
        'summary': batch.summary(),
        'result': batch.to_dict(),
    }
    report_dir = os.path.dirname(report_path)
    if report_dir:
        os.makedirs(report_dir, exist_ok=True)
    with open(report_path, 'w', encoding='utf-8') as f:
        json.dump(report, f, indent=2, ensure_ascii=False)
    return report_path


def main(argv=None):
    """Main CLI entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        config_manager = SyncConfig(args.config)
        # Overrides are applied to the cached config the manager hands out
        config = apply_cli_overrides(args, config_manager.load_config())

        log_settings = config['logging']
        app_logger = setup_logging(
            log_dir=log_settings.get('log_dir'),
            console_level=log_settings.get('console_level', 'INFO'),
            file_level=log_settings.get('file_level', 'DEBUG'),
            enable_console=log_settings.get('enable_console', True),
            enable_files=log_settings.get('enable_files', True),
        )
        logger = app_logger.get_logger('cli')

        if args.save_config:
            saved = config_manager.save_config(config)
            print(f"📄 Configuration saved: {saved}")

        options = config_manager.sync_options()
        auto_path = config_manager.get_option('tables.auto_path')
        if not auto_path:
            raise ConfigurationError("No djay automatic analysis table given",
                                     details="use --auto FILE or DJAYSYNC_AUTO_TABLE")

        if not os.path.exists(args.library):
            print(f"❌ Path not found: {args.library}")
            sys.exit(1)

        print("🎧 djay-sync")
        print("⚙️ Sync Configuration:")
        print(f"   Library: {args.library}")
        print(f"   Fields: {options.fields.value}")
        print(f"   Overwrite existing: {options.overwrite_existing}")
        print(f"   Dry run: {options.dry_run}")
        print()

        auto_table, manual_table = load_tables(auto_path, config_manager.get_option('tables.manual_path'))
        library, tracks = open_library(args.library)
        logger.info(f"Library opened: {len(tracks)} file tracks")

        engine = SyncEngine(auto_table, manual_table)
        start_time = time.time()

        with tqdm(total=len(tracks), desc='Syncing', unit='track',
                  disable=not config_manager.get_option('ui.progress_bars', True)) as progress:
            batch = engine.process_tracks(
                tracks, options,
                progress_callback=lambda position, total, outcome: progress.update(1)
            )

        failures = 0
        if not options.dry_run and batch.updated:
            failures = save_changes(library, tracks, config_manager.get_option('library.output_path'))

        print(f"\n✅ {batch.summary()}")
        if batch.unmatched:
            print(f"   Not found in djay: {batch.unmatched}")
        if batch.failed or failures:
            print(f"   Failed: {batch.failed + failures}")

        if args.verbose:
            for outcome in batch.outcomes:
                if outcome.updated:
                    resolved = outcome.resolved
                    print(f"   {outcome.display_name}: BPM {resolved.tempo}, key {resolved.key_label or '-'}")

        if args.report_path:
            report_file = write_report(batch, args.report_path, options)
            print(f"\n📊 Report written: {report_file}")

        print(f"\n📈 Session completed in {time.time() - start_time:.1f}s")

    except DjaySyncError as e:
        print(f"❌ Application Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print(f"\n\n⚠️ Sync interrupted by user")
        sys.exit(130)
    except Exception as e:
        print(f"❌ Unexpected Error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
