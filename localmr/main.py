#!/usr/bin/env python3
"""
LocalMR command line interface
==============================
Runs a MapReduce job on the local machine, or generates sample input for the
bundled airport/flight job.
"""
import argparse
import os
import sys
from typing import List, Optional

from localmr.core.job_manager import JobManager
from localmr.models.job import JobConfig
from localmr.services.data_generator import create_input_file
from localmr.utils.config import get_settings
from localmr.utils.logger import setup_logger


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``localmr`` command."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="localmr",
        description="Single-machine MapReduce engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Generate sample input, then run the airport job on it
  localmr generate --output data/airports.csv --flights 200
  localmr run -i data/airports.csv -o output/airports.txt \\
      --mapper localmr.jobs.airports:map_record \\
      --reducer localmr.jobs.airports:reduce_group

  # Word count with a combiner, sequential mode, sorted output
  localmr run -i book.txt -o output/words.txt --sequential \\
      --mapper localmr.jobs.word_count:map_words \\
      --reducer localmr.jobs.word_count:sum_counts \\
      --combiner localmr.jobs.word_count:combine_counts \\
      --finalizer localmr.core.merger:sort_by_key
        """,
    )
    parser.add_argument(
        '--log-level',
        default=settings.log_level,
        help=f'Logging level (default: {settings.log_level})'
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run a MapReduce job")
    run.add_argument(
        '--input', '-i',
        action='append',
        dest='input_paths',
        required=True,
        help='Input text file; repeat for several files'
    )
    run.add_argument(
        '--output', '-o',
        dest='output_path',
        help=f'Output file (default: {settings.output_dir}/<job name>.txt)'
    )
    run.add_argument('--mapper', help='Map logic as package.module:function')
    run.add_argument('--reducer', help='Reduce logic as package.module:function')
    run.add_argument('--combiner', help='Optional combiner as package.module:function')
    run.add_argument('--finalizer', help='Optional finalize hook as package.module:function')
    run.add_argument(
        '--chunk-size',
        type=int,
        default=settings.default_chunk_size,
        help=f'Records per map task (default: {settings.default_chunk_size})'
    )
    mode = run.add_mutually_exclusive_group()
    mode.add_argument(
        '--sequential',
        dest='multi_threaded',
        action='store_false',
        default=settings.multi_threaded,
        help='Run every task on the main thread'
    )
    mode.add_argument(
        '--parallel',
        dest='multi_threaded',
        action='store_true',
        help='Run tasks on a worker thread pool'
    )
    run.add_argument('--max-workers', type=int, help='Worker pool size (default: CPU count)')
    run.add_argument(
        '--stateful-reducer',
        action='store_true',
        help='Serialize reducer calls for reducers sharing state between keys'
    )
    run.add_argument('--job-name', '-n', default='localmr-job', help='Job name used in logs')

    generate = subparsers.add_parser("generate", help="Generate airport/flight sample input")
    generate.add_argument('--output', '-o', default='data/airports.csv', help='Output CSV file')
    generate.add_argument('--flights', '-f', type=int, default=100, help='Number of flights')
    generate.add_argument('--passengers', '-p', type=int, default=10,
                          help='Maximum passengers per flight')
    generate.add_argument('--seed', type=int, help='Random seed')

    return parser


def run_command(args: argparse.Namespace) -> int:
    output_path = args.output_path or os.path.join(
        get_settings().output_dir, f"{args.job_name}.txt"
    )
    try:
        config = JobConfig(
            job_name=args.job_name,
            input_paths=args.input_paths,
            output_path=output_path,
            mapper=args.mapper,
            reducer=args.reducer,
            combiner=args.combiner,
            finalizer=args.finalizer,
            chunk_size=args.chunk_size,
            multi_threaded=args.multi_threaded,
            max_workers=args.max_workers,
            stateful_reducer=args.stateful_reducer,
        )
    except ValueError as e:
        print(f"Error: invalid job configuration: {e}", file=sys.stderr)
        return 1

    result = JobManager().run_job(config)
    if not result.succeeded:
        print(f"Error: {result.error_message}", file=sys.stderr)
        return 1

    print(f"Job '{result.job_name}' {result.status.value}: {result.output_pairs} pairs "
          f"written to {result.output_path} in {result.duration_seconds:.3f}s")
    for task in result.failed_tasks:
        print(f"  task {task.task_id} failed on {task.failed_records} input(s): {task.error_message}")
    return 0


def generate_command(args: argparse.Namespace) -> int:
    if args.flights < 0 or args.passengers < 1:
        print("Error: --flights must be >= 0 and --passengers >= 1", file=sys.stderr)
        return 1
    path = create_input_file(args.output, args.flights, args.passengers, args.seed)
    print(f"Sample input created at: {path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main function with command line interface."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logger(args.log_level)

    if args.command == "run":
        return run_command(args)
    return generate_command(args)


if __name__ == "__main__":
    sys.exit(main())
