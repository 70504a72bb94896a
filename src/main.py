"""
Main pipeline orchestration for the food delivery analytics queries.
"""
import logging
import argparse
import time
import traceback
from datetime import datetime
from config import Config
from db.engine import create_db_engine, create_schema
from ingestion.loader import read_dataset
from transformation.cleaning import normalize_amounts, normalize_amounts_in_db
from transformation.quality import run_data_quality_checks, count_issues
from analysis.registry import QUERIES, run_queries
from loading.writer import write_query_results, export_results_to_csv

logger = logging.getLogger(__name__)


def run_pipeline(config_file='config.ini', queries=None, as_of=None, quality_check=None,
                 write_results=None, export_csv=None, reset_schema=False, engine=None):
    start_time = time.time()
    statistics = {
        'start_time': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        'status': 'failed',
        'stages': {},
    }

    try:
        logger.info("Starting food delivery analytics pipeline")

        # Load configuration
        config = Config(config_file)

        # Command line settings win over the config file
        if quality_check is None:
            quality_check = config.is_quality_check_enabled()
        if write_results is None:
            write_results = config.is_write_results_enabled()
        if export_csv is None:
            export_csv = config.is_export_csv_enabled()
        if as_of is None:
            as_of = config.get_as_of()

        logger.info(
            f"Pipeline mode: quality_check={quality_check}, write_results={write_results}, "
            f"export_csv={export_csv}, as_of={as_of or 'today'}"
        )

        if engine is None:
            engine = create_db_engine(config)

        if reset_schema:
            create_schema(engine)
            statistics['stages']['schema'] = {'recreated': True}

        # ---- Cleaning: a single write pass ahead of every reader
        stage_start = time.time()
        db_fixed = normalize_amounts_in_db(engine) if config.is_db_normalization_enabled() else 0

        # ---- Ingestion
        dataset = read_dataset(engine)
        memory_fixed = normalize_amounts(dataset)

        statistics['stages']['ingestion'] = {
            'duration': time.time() - stage_start,
            'rows_processed': dataset.row_counts(),
            'amounts_normalized': db_fixed + memory_fixed
        }

        # ---- Data Quality Checks
        if quality_check:
            stage_start = time.time()
            quality_results = run_data_quality_checks(dataset)
            statistics['stages']['quality_check'] = {
                'duration': time.time() - stage_start,
                'issues_found': count_issues(quality_results),
                'undelivered_orders': quality_results['undelivered_orders'].get('orders', {}).get('count', 0)
            }

        # ---- Queries
        stage_start = time.time()
        results = run_queries(dataset, queries, as_of=as_of)
        statistics['stages']['queries'] = {
            'duration': time.time() - stage_start,
            'rows_generated': {name: len(df) for name, df in results.items()}
        }

        # ---- Output
        if write_results:
            stage_start = time.time()
            tables = write_query_results(engine, results)
            statistics['stages']['loading'] = {
                'duration': time.time() - stage_start,
                'tables_written': len(tables)
            }

        if export_csv:
            exported_files = export_results_to_csv(results, config.get_output_path())
            statistics['stages']['export'] = {
                'files_exported': len(exported_files),
                'file_paths': exported_files
            }

        statistics['status'] = 'success'
        statistics['results'] = results
        logger.info("Food delivery analytics pipeline completed successfully")

    except Exception as e:
        logger.error(f"Pipeline execution failed: {str(e)}")
        logger.error(traceback.format_exc())
        statistics['status'] = 'failed'
        statistics['error'] = str(e)

    # Calculate total duration
    statistics['duration'] = time.time() - start_time

    return statistics


def main():
    """Command line entry point."""
    parser = argparse.ArgumentParser(description='Food Delivery Analytics')
    parser.add_argument('--config', default='config.ini', help='Path to configuration file')
    parser.add_argument('--create-schema', action='store_true',
                        help='Drop and recreate the five tables before running (destroys data)')
    parser.add_argument('--query', action='append', choices=sorted(QUERIES), dest='queries',
                        help='Query to run; repeat for several (default: all)')
    parser.add_argument('--as-of', help='Reference date (YYYY-MM-DD) for the rolling one-year queries')
    parser.add_argument('--no-quality-check', action='store_true', help='Skip data quality checks')
    parser.add_argument('--write-results', action='store_true', help='Write result tables to the database')
    parser.add_argument('--export-csv', action='store_true', help='Export results to CSV files')

    args = parser.parse_args()

    results = run_pipeline(
        config_file=args.config,
        queries=args.queries,
        as_of=args.as_of,
        quality_check=False if args.no_quality_check else None,
        write_results=True if args.write_results else None,
        export_csv=True if args.export_csv else None,
        reset_schema=args.create_schema
    )

    # Print summary
    print("\nPipeline Execution Summary:")
    print(f"Status: {results['status']}")
    print(f"Duration: {results['duration']:.2f} seconds")

    if results['status'] == 'failed' and 'error' in results:
        print(f"Error: {results['error']}")

    for stage, stats in results.get('stages', {}).items():
        print(f"\n{stage.capitalize()} stage:")
        for key, value in stats.items():
            if key not in ('rows_processed', 'rows_generated', 'file_paths'):
                print(f"  {key}: {value}")

    for name, df in results.get('results', {}).items():
        print(f"\n{name} ({len(df)} rows)")
        print(df.head(10).to_string(index=False))

    return 0 if results['status'] == 'success' else 1


if __name__ == "__main__":
    raise SystemExit(main())
