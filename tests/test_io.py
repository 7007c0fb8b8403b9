# -*- coding: utf-8 -*-
"""
Tests for data loading, project persistence, result export and logging.
"""

import json
import logging
import pytest
import pandas as pd
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


class TestDataLoader:
    """Test CSV/record loading and qualitative mapping."""

    def test_load_csv(self, sample_csv):
        from roc_topsis.data_loader import load_csv
        loaded = load_csv(sample_csv, 'Supplier', ['Price', 'Quality', 'Service'])

        # the row without a supplier name is skipped
        assert loaded.alternatives == ['North', 'East', 'South', 'West']
        assert loaded.cells[0] == [250.0, 7.0, 'Good']
        assert loaded.needs_mapping
        assert loaded.qualitative_mapping['Service'].unique_values == [
            'Good', 'Fair', 'Excellent']
        assert loaded.qualitative_mapping['Price'].unique_values == []
        assert loaded.unmapped == {'Service': ['Good', 'Fair', 'Excellent']}

    def test_unmapped_values_block_conversion(self, sample_csv):
        from roc_topsis.data_loader import load_csv
        from roc_topsis.exceptions import DataLoadError
        loaded = load_csv(sample_csv, 'Supplier', ['Price', 'Service'])
        with pytest.raises(DataLoadError, match="Row 1, column 'Service'") as excinfo:
            loaded.to_matrix()
        assert "Row 4, column 'Service'" in str(excinfo.value)

    def test_mapping_and_problem(self, sample_csv):
        from roc_topsis import run_pipeline
        from roc_topsis.data_loader import load_csv
        loaded = load_csv(sample_csv, 'Supplier', ['Price', 'Quality', 'Service'])
        loaded.set_mapping('Service', {'Good': 3, 'Fair': 2})
        assert loaded.unmapped == {'Service': ['Excellent']}
        loaded.set_mapping('Service', {'Excellent': 4})
        assert loaded.qualitative_mapping['Service'].is_complete

        assert loaded.to_matrix() == [
            [250.0, 7.0, 3.0],
            [200.0, 6.0, 2.0],
            [300.0, 9.0, 4.0],
            [275.0, 8.0, 3.0],
        ]

        problem = loaded.to_problem(['cost', 'benefit', 'benefit'],
                                    ['Quality', 'Price', 'Service'])
        result = run_pipeline(problem)
        assert sorted(r.rank for r in result.ranking) == [1, 2, 3, 4]

    def test_problem_defaults(self):
        from roc_topsis.data_loader import DecisionDataLoader
        loaded = DecisionDataLoader().load_records(
            [{'name': 'a', 'x': 1, 'y': 2}, {'name': 'b', 'x': 3, 'y': 4}],
            'name', ['x', 'y'])
        problem = loaded.to_problem()
        assert problem.criteria_types == ['benefit', 'benefit']
        assert problem.priority_order == ['x', 'y']

        problem = loaded.to_problem({'y': 'cost'})
        assert problem.criteria_types == ['benefit', 'cost']

    def test_load_records(self):
        from roc_topsis.data_loader import DecisionDataLoader
        loaded = DecisionDataLoader().load_records([
            {'name': ' a ', 'x': ' 1.5 ', 'y': 'High'},
            {'name': '  ', 'x': 2, 'y': 'Low'},
            {'name': 'b', 'x': 3, 'y': 'Low'},
            {'name': 'c', 'x': '12abc', 'y': '1e3'},
        ], 'name', ['x', 'y'])

        assert loaded.alternatives == ['a', 'b', 'c']
        assert loaded.cells == [[1.5, 'High'], [3.0, 'Low'], ['12abc', 1000.0]]
        assert loaded.qualitative_mapping['y'].unique_values == ['High', 'Low']
        # partially numeric text is a label, not a number
        assert loaded.qualitative_mapping['x'].unique_values == ['12abc']

    def test_blank_cell_is_an_error(self, tmp_path):
        from roc_topsis.data_loader import load_csv
        from roc_topsis.exceptions import DataLoadError
        path = tmp_path / "gaps.csv"
        path.write_text("name,x\na,1\nb,\n", encoding="utf-8")
        loaded = load_csv(path, 'name', ['x'])
        assert not loaded.needs_mapping
        with pytest.raises(DataLoadError, match="Row 2"):
            loaded.to_matrix()

    def test_set_unknown_label_or_criterion(self, sample_csv):
        from roc_topsis.data_loader import load_csv
        from roc_topsis.exceptions import DataLoadError
        loaded = load_csv(sample_csv, 'Supplier', ['Price', 'Service'])
        with pytest.raises(DataLoadError, match="Unknown qualitative value"):
            loaded.set_mapping('Service', {'Superb': 5})
        with pytest.raises(DataLoadError, match="Unknown criterion"):
            loaded.set_mapping('Quality', {'Good': 1})

    @pytest.mark.parametrize("alt_col, criteria, message", [
        ('Vendor', ['Price'], "Missing required columns"),
        ('Supplier', ['Price', 'Cost'], "Missing required columns"),
        ('Supplier', ['Supplier', 'Price'], "cannot be both"),
        ('Supplier', ['Price', 'Price'], "more than once"),
        ('Supplier', [], "at least one"),
        ('', ['Price'], "alternative names"),
    ])
    def test_invalid_selection(self, sample_csv, alt_col, criteria, message):
        from roc_topsis.data_loader import load_csv
        from roc_topsis.exceptions import DataLoadError
        with pytest.raises(DataLoadError, match=message):
            load_csv(sample_csv, alt_col, criteria)

    def test_missing_file(self, tmp_path):
        from roc_topsis.data_loader import load_csv
        from roc_topsis.exceptions import DataLoadError
        with pytest.raises(DataLoadError, match="not found"):
            load_csv(tmp_path / "absent.csv", 'name', ['x'])

    def test_empty_tables(self, tmp_path):
        from roc_topsis.data_loader import load_csv
        from roc_topsis.exceptions import DataLoadError
        header_only = tmp_path / "header.csv"
        header_only.write_text("name,x\n", encoding="utf-8")
        with pytest.raises(DataLoadError, match="empty"):
            load_csv(header_only, 'name', ['x'])

        empty = tmp_path / "empty.csv"
        empty.write_text("", encoding="utf-8")
        with pytest.raises(DataLoadError):
            load_csv(empty, 'name', ['x'])

        no_names = tmp_path / "nonames.csv"
        no_names.write_text("name,x\n,1\n ,2\n", encoding="utf-8")
        with pytest.raises(DataLoadError, match="no rows"):
            load_csv(no_names, 'name', ['x'])


class TestProjectStore:
    """Test JSON-file project persistence."""

    def test_create_and_get(self, tmp_path, simple_problem):
        from roc_topsis.projects import ProjectStore
        store = ProjectStore(tmp_path / "projects")
        document = dict(simple_problem, savedProjects=[1, 2], showLoadProjectModal=True,
                        loadProjectError="x")

        project = store.create("  Laptop choice ", document)
        assert project.name == "Laptop choice"
        assert len(project.id) == 32
        assert project.created_at == project.updated_at
        assert set(project.data) == set(simple_problem)
        assert (tmp_path / "projects" / f"{project.id}.json").exists()

        loaded = store.get(project.id)
        assert loaded == project
        assert loaded.problem().alternatives == ['A', 'B']

    def test_stored_problem_ranks(self, tmp_path):
        from roc_topsis import run_pipeline
        from roc_topsis.projects import ProjectStore
        store = ProjectStore(tmp_path)
        project = store.create("doc", {
            'alternatives': ['A', 'B'],
            'criteria': ['cost', 'quality'],
            'values': [[10, 8], [5, 9]],
            'criteriaTypes': {'cost': 'cost', 'quality': 'benefit'},
            'prioritizedCriteria': ['quality', 'cost'],
        })
        result = run_pipeline(store.get(project.id).problem())
        assert result.ranking[0].alternative == 'B'

    def test_saved_project_state_ranks(self, tmp_path):
        from roc_topsis import run_pipeline
        from roc_topsis.projects import ProjectStore
        store = ProjectStore(tmp_path)
        project = store.create("state", {
            'alternatives': ['A', 'B'],
            'criteria': ['cost', 'quality'],
            'matrixValues': [[10, 8], [5, 9]],
            'criteriaTypes': {'cost': 'cost', 'quality': 'benefit'},
            'prioritizedCriteria': ['quality', 'cost'],
            'showLoadProjectModal': False,
        })
        problem = store.get(project.id).problem()
        assert problem.values == [[10, 8], [5, 9]]
        assert run_pipeline(problem).ranking[0].alternative == 'B'

    def test_list_newest_first(self, tmp_path, monkeypatch):
        from roc_topsis import projects
        stamps = iter([
            "2026-01-01T10:00:00+00:00",
            "2026-01-02T10:00:00+00:00",
            "2026-01-03T10:00:00+00:00",
            "2026-01-04T10:00:00+00:00",
        ])
        monkeypatch.setattr(projects, "_utcnow", lambda: next(stamps))

        store = projects.ProjectStore(tmp_path)
        first = store.create("first", {'k': 1})
        second = store.create("second", {'k': 2})
        third = store.create("third", {'k': 3})
        store.update(first.id, {'k': 10})

        summaries = store.list()
        assert [s.name for s in summaries] == ["third", "second", "first"]
        assert all(not hasattr(s, 'data') for s in summaries)
        assert summaries[2].updated_at == "2026-01-04T10:00:00+00:00"
        assert summaries[0].id == third.id
        assert second.id in {s.id for s in summaries}

    def test_update(self, tmp_path, monkeypatch):
        from roc_topsis import projects
        stamps = iter(["2026-03-01T00:00:00+00:00", "2026-03-02T00:00:00+00:00",
                       "2026-03-03T00:00:00+00:00"])
        monkeypatch.setattr(projects, "_utcnow", lambda: next(stamps))

        store = projects.ProjectStore(tmp_path)
        project = store.create("draft", {'alternatives': ['x']})
        updated = store.update(project.id, {'alternatives': ['x', 'y'], 'savedProjects': []})
        assert updated.data == {'alternatives': ['x', 'y']}
        assert updated.name == "draft"
        assert updated.created_at == "2026-03-01T00:00:00+00:00"
        assert updated.updated_at == "2026-03-02T00:00:00+00:00"

        renamed = store.update(project.id, {'alternatives': ['z']}, name=" final ")
        assert store.get(project.id).name == "final"
        assert renamed.data == {'alternatives': ['z']}

    def test_empty_store(self, tmp_path):
        from roc_topsis.projects import ProjectStore
        assert ProjectStore(tmp_path / "missing").list() == []

    @pytest.mark.parametrize("project_id", ["0123abcd", "../secrets", ""])
    def test_not_found(self, tmp_path, project_id):
        from roc_topsis.projects import ProjectStore
        from roc_topsis.exceptions import ProjectNotFoundError
        store = ProjectStore(tmp_path)
        with pytest.raises(ProjectNotFoundError):
            store.get(project_id)
        with pytest.raises(KeyError):
            store.update(project_id, {'a': 1})

    def test_not_found_message(self, tmp_path):
        from roc_topsis.projects import ProjectStore
        from roc_topsis.exceptions import ProjectNotFoundError
        with pytest.raises(ProjectNotFoundError) as excinfo:
            ProjectStore(tmp_path).get("abc")
        assert str(excinfo.value) == "Project not found: abc"

    @pytest.mark.parametrize("name, data, message", [
        ("", {'a': 1}, "name is required"),
        ("   ", {'a': 1}, "name is required"),
        (None, {'a': 1}, "name is required"),
        ("ok", {}, "data is required"),
        ("ok", None, "data is required"),
    ])
    def test_invalid_create(self, tmp_path, name, data, message):
        from roc_topsis.projects import ProjectStore
        from roc_topsis.exceptions import ProjectError
        with pytest.raises(ProjectError, match=message):
            ProjectStore(tmp_path).create(name, data)

    def test_corrupt_file(self, tmp_path):
        from roc_topsis.projects import ProjectStore
        from roc_topsis.exceptions import ProjectError
        (tmp_path / "abc123.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(ProjectError, match="Corrupt"):
            ProjectStore(tmp_path).get("abc123")


class TestOutputManager:
    """Test result export."""

    def test_save_all(self, tmp_path, simple_problem):
        from roc_topsis import run_pipeline
        from roc_topsis.output_manager import OutputManager
        result = run_pipeline(simple_problem)
        paths = OutputManager(tmp_path / "out").save_all(result)

        assert set(paths) == {'ranking', 'weights', 'report'}
        assert all(Path(p).exists() for p in paths.values())

        ranking = pd.read_csv(paths['ranking'])
        assert list(ranking.columns) == ['Rank', 'Alternative', 'Preference']
        assert ranking['Alternative'].tolist() == ['B', 'A']
        assert ranking['Rank'].tolist() == [1, 2]

        weights = pd.read_csv(paths['weights'])
        assert weights['Criterion'].tolist() == ['cost', 'quality']
        assert weights['Priority'].tolist() == [2, 1]
        assert weights['Weight'].tolist() == pytest.approx([0.25, 0.75])

        with open(paths['report'], encoding='utf-8') as f:
            report = json.load(f)
        assert report['run_id'] == result.run_id
        assert report['ranking'][0]['alternative'] == 'B'
        assert report['input']['criteriaTypes'] == ['cost', 'benefit']

    def test_configured_file_names(self, tmp_path, simple_problem):
        from roc_topsis import run_pipeline
        from roc_topsis.config import OutputConfig
        from roc_topsis.output_manager import OutputManager
        config = OutputConfig(ranking_file="r.csv", float_format="%.2f")
        manager = OutputManager(tmp_path, config)
        path = manager.save_ranking(run_pipeline(simple_problem).ranking)
        assert Path(path) == tmp_path / "results" / "r.csv"
        assert "1.00" in Path(path).read_text()


class TestLogging:
    """Test logger setup and helpers."""

    def test_module_logger_names(self):
        from roc_topsis.logger import get_module_logger
        assert get_module_logger("weighting.roc").name == "roc_topsis.weighting.roc"
        assert get_module_logger("roc_topsis.mcdm").name == "roc_topsis.mcdm"

    def test_file_logging(self, tmp_path):
        from roc_topsis.logger import setup_logger, get_module_logger
        log_file = tmp_path / "logs" / "run.log"
        setup_logger(level="WARNING", log_file=log_file, console=False)

        get_module_logger("tests.file").debug("\033[31mdebug detail\033[0m")
        text = log_file.read_text(encoding="utf-8")
        assert "debug detail" in text
        assert "\033[" not in text
        assert "roc_topsis.tests.file" in text

    def test_json_logging_carries_context(self, tmp_path):
        from roc_topsis.logger import setup_logger, get_module_logger, log_context
        json_file = tmp_path / "run.jsonl"
        setup_logger(level="INFO", json_file=json_file, console=False)

        logger = get_module_logger("tests.json")
        with log_context(run_id="r-42"):
            logger.info("inside")
        logger.debug("filtered out")
        logger.info("outside")

        lines = [json.loads(line) for line in
                 json_file.read_text(encoding="utf-8").splitlines()]
        assert [entry['message'] for entry in lines] == ["inside", "outside"]
        assert lines[0]['run_id'] == "r-42"
        assert lines[0]['level'] == "INFO"
        assert 'run_id' not in lines[1]

    def test_pipeline_run_is_tagged(self, tmp_path, simple_problem):
        from roc_topsis import run_pipeline
        from roc_topsis.logger import setup_logger
        json_file = tmp_path / "run.jsonl"
        setup_logger(level="DEBUG", json_file=json_file, console=False)

        result = run_pipeline(simple_problem)
        entries = [json.loads(line) for line in
                   json_file.read_text(encoding="utf-8").splitlines()]
        assert any(e['message'].startswith("Completed: Ranking") for e in entries)
        assert all(e.get('run_id') == result.run_id for e in entries)

    def test_json_formatter_exception(self):
        from roc_topsis.logger import JSONFormatter
        try:
            raise ValueError("bad input")
        except ValueError:
            record = logging.LogRecord("roc_topsis.x", logging.ERROR, __file__, 1,
                                       "failed %s", ("now",), sys.exc_info())
        data = json.loads(JSONFormatter().format(record))
        assert data['message'] == "failed now"
        assert data['exception']['type'] == "ValueError"
        assert data['exception']['message'] == "bad input"

    def test_log_context_is_temporary(self):
        from roc_topsis.logger import ContextFilter, LogContext, log_context
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
        with log_context(phase="load"):
            ContextFilter().filter(record)
        assert record.phase == "load"
        assert "phase" not in LogContext.get()

    def test_progress_logger(self, caplog):
        from roc_topsis.logger import ProgressLogger, get_module_logger
        caplog.set_level(logging.INFO, logger="roc_topsis")
        logger = get_module_logger("tests.progress")

        with ProgressLogger(logger, "Import") as progress:
            assert progress.status == "running"
        assert progress.status == "completed"
        assert "Completed: Import" in caplog.text

        with pytest.raises(RuntimeError):
            with ProgressLogger(logger, "Export") as progress:
                raise RuntimeError("disk full")
        assert progress.status == "failed"
        assert "Failed: Export" in caplog.text
        assert "disk full" in caplog.text

    def test_log_exceptions(self, caplog):
        from roc_topsis.logger import get_module_logger, log_exceptions

        @log_exceptions(get_module_logger("tests.decorator"))
        def explode():
            raise KeyError("gone")

        with pytest.raises(KeyError):
            explode()
        assert "explode failed: KeyError" in caplog.text

    def test_strip_ansi(self):
        from roc_topsis.logger import strip_ansi
        assert strip_ansi("\033[1m\033[32mok\033[0m") == "ok"
