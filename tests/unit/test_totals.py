"""Unit tests for the totals pipeline entry point"""

import pytest
import pandas as pd
import numpy as np

from survey_totals import get_totals, TotalsPipeline, TotalsConfig
from survey_totals.exceptions import (
    SchemaError, WeightTypeError, ConfigError, EmptyInputWarning
)


class TestGetTotals:
    """Test end-to-end totals on the worked examples"""

    def test_percent_single_weight(self, scenario_df):
        """Test A=50, B=50, Missing shown as raw weighted sum 2"""
        table = get_totals(scenario_df, 'v', weights='w', mode='percent', digits=1).table

        assert list(table.index) == ['A', 'B', 'Missing']
        assert list(table.columns) == ['w']
        assert table['w'].tolist() == [50.0, 50.0, 2.0]

    def test_count_single_weight(self, scenario_df):
        """Test count mode conserves the weight total"""
        table = get_totals(scenario_df, 'v', weights='w', mode='count').table

        assert table['w'].tolist() == [4.0, 4.0, 2.0]
        assert table['w'].sum() == scenario_df['w'].sum()

    def test_two_uniform_weights(self, scenario_df):
        """Test uniform weights give identical percentages, different counts"""
        percent = get_totals(scenario_df, 'v', weights=['w1', 'w2']).table
        assert list(percent.columns) == ['w1', 'w2']
        assert percent.loc[['A', 'B'], 'w1'].tolist() == [50.0, 50.0]
        assert percent.loc[['A', 'B'], 'w2'].tolist() == [50.0, 50.0]

        counts = get_totals(scenario_df, 'v', weights=['w1', 'w2'], mode='count').table
        assert counts['w1'].sum() == 5.0
        assert counts['w2'].sum() == 10.0

    def test_unweighted_only(self, scenario_df):
        table = get_totals(scenario_df, 'v', mode='count').table
        assert list(table.columns) == ['Unweighted']
        assert table['Unweighted'].tolist() == [2.0, 2.0, 1.0]

    def test_include_unweighted_first(self, scenario_df):
        table = get_totals(scenario_df, 'v', weights=['w'], include_unweighted=True).table
        assert list(table.columns) == ['Unweighted', 'w']
        assert table['Unweighted'].tolist() == [50.0, 50.0, 1.0]

    def test_weight_names(self, scenario_df):
        table = get_totals(scenario_df, 'v', weights=['w1', 'w2'],
                           weight_names=['Design', 'Final']).table
        assert list(table.columns) == ['Design', 'Final']

    def test_grouped_one_table_per_weight(self, crosstab_df):
        """Test grouping with several weights never builds a 3-axis table"""
        crosstab_df['weight2'] = 1.0
        result = get_totals(crosstab_df, 'vote', weights=['weight', 'weight2'], by='region',
                            by_total=True, include_unweighted=True)

        assert result.names == ['Unweighted', 'weight', 'weight2']
        for table in result.tables.values():
            assert list(table.columns) == ['Total', 'South', 'North', 'Missing']
            assert list(table.index) == ['Yes', 'No', 'Missing']

        assert result['weight']['Total'].tolist() == [44.4, 55.6, 3.0]
        assert result['weight2'].equals(result['Unweighted'])

    def test_grouped_columns_sum_to_100(self, crosstab_df):
        result = get_totals(crosstab_df, 'vote', weights='weight', by='region', digits=6)
        closure = result.table.loc[['Yes', 'No']].sum(axis=0)
        np.testing.assert_allclose(closure.to_numpy(), 100.0, atol=1e-5)

    def test_row_dicts_input(self):
        """Test a sequence of row mappings with explicit levels"""
        rows = [
            {'q': 'b', 'w': 1.0},
            {'q': 'a', 'w': 3.0},
            {'q': None, 'w': 1.0},
        ]
        table = get_totals(rows, 'q', weights='w', levels={'q': ['b', 'a']}, digits=0).table
        assert list(table.index) == ['b', 'a', 'Missing']
        assert table['w'].tolist() == [25.0, 75.0, 1.0]

    def test_missing_labels(self):
        df = pd.DataFrame({'q': ['Yes', 'Refused', 'No', 'No'], 'w': [1.0] * 4})
        table = get_totals(df, 'q', weights='w', levels={'q': ['Yes', 'No', 'Refused']},
                           missing_labels=['Refused'], digits=1).table
        assert list(table.index) == ['Yes', 'No', 'Missing']
        assert table['w'].tolist() == [33.3, 66.7, 1.0]

    def test_absent_weight_row(self, scenario_df):
        scenario_df.loc[0, 'w'] = np.nan
        table = get_totals(scenario_df, 'v', weights=['w', 'w1'], mode='count').table
        assert table['w'].tolist() == [2.0, 4.0, 2.0]
        assert table['w1'].tolist() == [2.0, 2.0, 1.0]

    def test_parallel_option(self, synthetic_survey):
        serial = get_totals(synthetic_survey, 'satisfaction',
                            weights=['design_weight', 'final_weight'])
        parallel = get_totals(synthetic_survey, 'satisfaction',
                              weights=['design_weight', 'final_weight'], parallel=True)
        pd.testing.assert_frame_equal(serial.table, parallel.table)

    def test_title_and_labels(self, scenario_df):
        result = get_totals(scenario_df, 'v', weights='w', title='Vote intention',
                            labels={'Total': 'All adults'})
        assert result.title == 'Vote intention'
        assert result.labels == {'Total': 'All adults'}

    def test_config_object_and_overrides(self, scenario_df):
        config = TotalsConfig(mode='count')
        result = get_totals(scenario_df, 'v', weights='w', config=config, include_unweighted=True)
        assert result.config.mode.value == 'count'
        assert list(result.table.columns) == ['Unweighted', 'w']
        assert config.include_unweighted is False


class TestTotalsErrors:
    """Test fatal errors and warnings"""

    def test_missing_primary_column(self, scenario_df):
        with pytest.raises(SchemaError, match="nope"):
            get_totals(scenario_df, 'nope', weights='w')

    def test_missing_grouping_column(self, scenario_df):
        with pytest.raises(SchemaError, match="grouping"):
            get_totals(scenario_df, 'v', weights='w', by='nope')

    def test_missing_weight_column(self, scenario_df):
        with pytest.raises(SchemaError, match="nope"):
            get_totals(scenario_df, 'v', weights=['w', 'nope'])

    def test_plain_column_without_levels(self):
        df = pd.DataFrame({'q': ['a', 'b'], 'w': [1.0, 1.0]})
        with pytest.raises(SchemaError, match="level order"):
            get_totals(df, 'q', weights='w')

    def test_value_outside_levels(self):
        df = pd.DataFrame({'q': ['a', 'z'], 'w': [1.0, 1.0]})
        with pytest.raises(SchemaError, match="'z'"):
            get_totals(df, 'q', weights='w', levels={'q': ['a', 'b']})

    def test_negative_weight(self, scenario_df):
        scenario_df.loc[2, 'w'] = -1.0
        with pytest.raises(WeightTypeError, match="negative"):
            get_totals(scenario_df, 'v', weights='w')

    def test_non_numeric_weight(self, scenario_df):
        scenario_df['w'] = scenario_df['w'].astype(object)
        scenario_df.loc[2, 'w'] = 'x'
        with pytest.raises(TypeError):
            get_totals(scenario_df, 'v', weights='w')

    def test_boolean_weight(self):
        df = pd.DataFrame({
            'q': pd.Categorical(['a', 'b'], categories=['a', 'b']),
            'w': [True, False]
        })
        with pytest.raises(WeightTypeError, match="boolean"):
            get_totals(df, 'q', weights='w')

    def test_large_digits(self, scenario_df):
        """Test very high precision requests round without error"""
        table = get_totals(scenario_df, 'v', weights='w', digits=400).table
        assert table['w'].tolist() == [50.0, 50.0, 2.0]

    def test_negative_digits(self, scenario_df):
        with pytest.raises(ConfigError, match="digits"):
            get_totals(scenario_df, 'v', weights='w', digits=-1)

    def test_config_checked_before_schema(self, scenario_df):
        """Test bad configuration is reported before any column lookup"""
        with pytest.raises(ConfigError):
            get_totals(scenario_df, 'nope', weights='w', digits=-1)

    def test_unknown_option(self, scenario_df):
        with pytest.raises(ConfigError, match="Unknown configuration"):
            get_totals(scenario_df, 'v', weights='w', colour='blue')

    def test_weight_names_length(self, scenario_df):
        with pytest.raises(ConfigError, match="weight_names"):
            get_totals(scenario_df, 'v', weights=['w1', 'w2'], weight_names=['only one'])

    def test_duplicate_weights(self, scenario_df):
        with pytest.raises(ConfigError, match="unique"):
            get_totals(scenario_df, 'v', weights=['w', 'w'])

    def test_grouping_same_as_primary(self, scenario_df):
        with pytest.raises(ConfigError, match="differ"):
            get_totals(scenario_df, 'v', weights='w', by='v')

    def test_label_collision(self):
        df = pd.DataFrame({
            'q': pd.Categorical(['Missing', None], categories=['Missing', 'Other']),
            'w': [1.0, 1.0]
        })
        with pytest.raises(ConfigError, match="missing_label"):
            get_totals(df, 'q', weights='w')
        table = get_totals(df, 'q', weights='w', missing_label='No answer').table
        assert list(table.index) == ['Missing', 'Other', 'No answer']

    def test_unweighted_label_collision(self):
        df = pd.DataFrame({
            'q': pd.Categorical(['a'], categories=['a']),
            'Unweighted': [1.0]
        })
        with pytest.raises(ConfigError, match="collides"):
            get_totals(df, 'q', weights='Unweighted', include_unweighted=True)

    def test_zero_rows_warns(self):
        """Test an empty table is a valid, all-zero result"""
        df = pd.DataFrame({
            'q': pd.Categorical([], categories=['a', 'b']),
            'w': pd.Series([], dtype=float)
        })
        with pytest.warns(EmptyInputWarning, match="zero rows"):
            result = get_totals(df, 'q', weights='w')

        assert list(result.table.index) == ['a', 'b']
        assert result.table['w'].tolist() == [0.0, 0.0]

    def test_unobserved_level_warns(self):
        df = pd.DataFrame({
            'q': pd.Categorical(['a', 'a'], categories=['a', 'b']),
            'w': [1.0, 1.0]
        })
        with pytest.warns(EmptyInputWarning, match="never appear"):
            table = get_totals(df, 'q', weights='w').table
        assert table['w'].tolist() == [100.0, 0.0]


class TestTotalsPipeline:
    """Test the pipeline class directly"""

    def test_run(self, scenario_df):
        pipeline = TotalsPipeline(TotalsConfig(mode='count'))
        result = pipeline.run(scenario_df, 'v', weights=['w'])
        assert result.table['w'].sum() == 10.0

    def test_default_config(self, scenario_df):
        pipeline = TotalsPipeline()
        assert pipeline.config.digits == 1
        assert pipeline.run(scenario_df, 'v', 'w').table['w'].tolist() == [50.0, 50.0, 2.0]
