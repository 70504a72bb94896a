import os

import pytest
from sqlalchemy import create_engine

import main
from config import Config
from db.engine import create_schema
from loading.writer import write_dataset


CONFIG_TEMPLATE = """
[DATABASE]
type = sqlite
name =

[LOGGING]
level = INFO
file =

[PATHS]
output_dir = {output_dir}

[PIPELINE]
as_of = 2024-06-30
export_csv = {export_csv}
"""


def write_config(tmp_path, export_csv='false'):
    path = tmp_path / 'config.ini'
    path.write_text(CONFIG_TEMPLATE.format(output_dir=tmp_path / 'output', export_csv=export_csv))
    return str(path)


@pytest.fixture
def engine(raw_dataset):
    engine = create_engine('sqlite://')
    create_schema(engine)
    write_dataset(engine, raw_dataset)
    yield engine
    engine.dispose()


def test_pipeline_runs_every_query(tmp_path, engine):
    stats = main.run_pipeline(write_config(tmp_path), engine=engine)

    assert stats['status'] == 'success'
    assert len(stats['results']) == 20
    assert stats['stages']['ingestion']['amounts_normalized'] == 1
    assert stats['stages']['ingestion']['rows_processed']['orders'] == 17
    assert stats['stages']['quality_check']['undelivered_orders'] == 8


def test_pipeline_exports_csv(tmp_path, engine):
    stats = main.run_pipeline(write_config(tmp_path, export_csv='true'), engine=engine)

    exported = stats['stages']['export']['file_paths']
    assert 'city_revenue_rank' in exported
    # empty results are not exported
    assert 'high_value_customers' not in exported
    assert all(os.path.exists(path) for path in exported.values())


def test_pipeline_writes_result_tables(tmp_path, engine):
    stats = main.run_pipeline(
        write_config(tmp_path), queries=['city_revenue_rank'], write_results=True, engine=engine
    )

    assert stats['stages']['loading']['tables_written'] == 1
    assert list(stats['results']) == ['city_revenue_rank']


def test_pipeline_reports_failures(tmp_path, engine):
    stats = main.run_pipeline(write_config(tmp_path), queries=['no_such_query'], engine=engine)

    assert stats['status'] == 'failed'
    assert 'no_such_query' in stats['error']


def test_cli_fails_on_an_empty_database(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr('sys.argv', ['main', '--config', write_config(tmp_path), '--create-schema'])

    assert main.main() == 1
    assert 'Status: failed' in capsys.readouterr().out


def test_config_defaults_when_file_is_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = Config('missing.ini')

    assert config.get_database_config()['type'] == 'postgresql'
    assert config.get_as_of() is None
    assert config.is_quality_check_enabled()
    assert not config.is_write_results_enabled()
    assert config.get_output_path('x.csv') == os.path.join('data/output', 'x.csv')
    assert os.path.isdir(tmp_path / 'data' / 'output')


def test_config_file_overrides(tmp_path):
    config = Config(write_config(tmp_path, export_csv='true'))

    assert config.get_database_config()['type'] == 'sqlite'
    assert config.get_as_of() == '2024-06-30'
    assert config.is_export_csv_enabled()
