"""Pytest configuration and fixtures"""

import pytest
import pandas as pd
import numpy as np
import tempfile
from pathlib import Path

from survey_totals.data import SyntheticSurveyGenerator
from survey_totals.models import CategoricalColumn, MISSING


@pytest.fixture
def scenario_df():
    """Five respondents, one missing answer, three weights"""
    return pd.DataFrame({
        'v': pd.Categorical(['A', 'A', 'B', 'B', None], categories=['A', 'B']),
        'w': [2.0, 2.0, 3.0, 1.0, 2.0],
        'w1': [1.0] * 5,
        'w2': [2.0] * 5
    })


@pytest.fixture
def crosstab_df():
    """Vote by region with a missing vote and a missing region"""
    return pd.DataFrame({
        'vote': pd.Categorical(
            ['Yes', 'No', 'Yes', 'Yes', 'No', None, 'No', 'Yes'],
            categories=['Yes', 'No']
        ),
        'region': pd.Categorical(
            ['North', 'North', 'South', 'South', 'South', 'North', None, 'North'],
            categories=['South', 'North']
        ),
        'weight': [1.0, 2.0, 1.5, 0.5, 1.0, 3.0, 2.0, 1.0]
    })


@pytest.fixture
def scenario_column():
    """Primary column of the worked example"""
    return CategoricalColumn(name='v', values=('A', 'A', 'B', 'B', MISSING), levels=('A', 'B'))


@pytest.fixture
def synthetic_generator():
    """Create synthetic survey generator with fixed seed"""
    return SyntheticSurveyGenerator(seed=42)


@pytest.fixture
def synthetic_survey(synthetic_generator):
    """Synthetic survey sample"""
    return synthetic_generator.generate(rows=500)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
