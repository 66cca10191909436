"""Generate synthetic survey responses for demos and testing"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Union

import numpy as np
import pandas as pd

from .data_loader import SurveyDataLoader


@dataclass
class QuestionProfile:
    """Response distribution for one categorical question"""
    levels: List[str]
    probabilities: List[float]
    missing_rate: float = 0.0


class SyntheticSurveyGenerator:
    """Generate survey rows with categorical answers and positive weights"""

    def __init__(self, seed: int = 42):
        self.seed = seed
        self.rng = np.random.default_rng(seed)

        self.questions: Dict[str, QuestionProfile] = {
            'region': QuestionProfile(
                levels=['North', 'South', 'East', 'West'],
                probabilities=[0.30, 0.25, 0.25, 0.20]
            ),
            'age_group': QuestionProfile(
                levels=['18-34', '35-54', '55+'],
                probabilities=[0.30, 0.40, 0.30],
                missing_rate=0.02
            ),
            'satisfaction': QuestionProfile(
                levels=['Very satisfied', 'Satisfied', 'Dissatisfied', 'Very dissatisfied'],
                probabilities=[0.25, 0.40, 0.25, 0.10],
                missing_rate=0.05
            )
        }

    def generate(self, rows: int = 1000) -> pd.DataFrame:
        """
        Generate respondents

        Columns are pandas Categoricals (NaN for non-response) plus two
        weights: ``design_weight`` and ``final_weight`` (design weight
        raked by region).
        """
        data = {'respondent_id': np.arange(1, rows + 1)}

        for name, profile in self.questions.items():
            answers = self.rng.choice(profile.levels, size=rows, p=profile.probabilities)
            answers = answers.astype(object)
            answers[self.rng.random(rows) < profile.missing_rate] = np.nan
            data[name] = pd.Categorical(answers, categories=profile.levels)

        design = self.rng.uniform(0.5, 2.0, size=rows).round(4)
        region_factor = pd.Series(data['region']).map(
            {'North': 0.9, 'South': 1.1, 'East': 1.0, 'West': 1.2}
        ).astype(float).to_numpy()
        data['design_weight'] = design
        data['final_weight'] = (design * region_factor).round(4)

        return pd.DataFrame(data)

    def levels(self) -> Dict[str, List[str]]:
        return {name: list(profile.levels) for name, profile in self.questions.items()}

    def save(self, output_dir: Union[str, Path], rows: int = 1000) -> Dict[str, Path]:
        """Write ``survey.csv`` and ``levels.yaml`` into ``output_dir``"""
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        survey_path = output_dir / 'survey.csv'
        levels_path = output_dir / 'levels.yaml'

        self.generate(rows).to_csv(survey_path, index=False)
        SurveyDataLoader(self.levels()).save_levels(levels_path)

        return {'survey': survey_path, 'levels': levels_path}
