"""
Pytest configuration and fixtures for ROC-TOPSIS tests.
"""
import logging

import pytest
import numpy as np


@pytest.fixture(autouse=True)
def reset_package_state():
    """Undo logger and global config changes made by a test."""
    yield
    from roc_topsis.config import reset_config
    from roc_topsis.logger import LOG_NAME, LogContext, LoggerFactory

    logger = logging.getLogger(LOG_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.filters.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    LoggerFactory._configured = False
    LogContext.clear()
    reset_config()


@pytest.fixture
def simple_problem():
    """Two alternatives, one cost and one benefit criterion."""
    return {
        'alternatives': ['A', 'B'],
        'criteria': ['cost', 'quality'],
        'values': [[10, 8], [5, 9]],
        'criteria_types': ['cost', 'benefit'],
        'priority_order': ['quality', 'cost'],
    }


@pytest.fixture
def supplier_problem():
    """Four suppliers rated on price (cost), quality, delivery (cost) and service."""
    return {
        'alternatives': ['North', 'East', 'South', 'West'],
        'criteria': ['price', 'quality', 'delivery', 'service'],
        'values': [
            [250.0, 7.0, 12.0, 3.0],
            [200.0, 6.0, 10.0, 4.0],
            [300.0, 9.0, 15.0, 5.0],
            [275.0, 8.0, 9.0, 2.0],
        ],
        'criteria_types': ['cost', 'benefit', 'cost', 'benefit'],
        'priority_order': ['quality', 'price', 'service', 'delivery'],
    }


@pytest.fixture
def random_matrix():
    """Create a random positive decision matrix for property checks."""
    def _make(n_alternatives=8, n_criteria=5, seed=42):
        rng = np.random.RandomState(seed)
        return rng.uniform(0.5, 100.0, size=(n_alternatives, n_criteria))
    return _make


@pytest.fixture
def sample_csv(tmp_path):
    """CSV with a blank-name row and qualitative service ratings."""
    path = tmp_path / "suppliers.csv"
    path.write_text(
        "Supplier,Price,Quality,Service,Notes\n"
        "North,250,7,Good,ok\n"
        "East,200,6,Fair,\n"
        ",999,1,Bad,ignored\n"
        "South,300,9,Excellent,late\n"
        "West,275,8,Good,\n",
        encoding="utf-8",
    )
    return path
