from dataclasses import dataclass
from typing import List, Tuple

SURVEY_TABLE = "reponses_sondage"

SINGLE_CHOICE_COLUMNS = (
    "age_tranche",
    "frequence_utilisation_rs",
    "temps_utilisation_rs",
    "frequence_fake",
    "exposition_croyance_fake",
    "utilisation_vera",
)
MULTI_CHOICE_COLUMNS = ("contenu_rs", "moyen_utilisation_vera", "moyen_verification")
SCALE_COLUMNS = ("satisfaction_vera", "verification_info", "danger_desinformation")


@dataclass(frozen=True)
class SurveySchema:
    """Which columns of the response table feed which statistic."""
    table: str = SURVEY_TABLE
    single_choice: Tuple[str, ...] = SINGLE_CHOICE_COLUMNS
    multi_choice: Tuple[str, ...] = MULTI_CHOICE_COLUMNS
    scales: Tuple[str, ...] = SCALE_COLUMNS
    created_at: str = "created_at"
    created_at_fallback: str = "createdAt"

    def columns(self) -> List[str]:
        return [*self.single_choice, *self.multi_choice, *self.scales, self.created_at]


DEFAULT_SCHEMA = SurveySchema()
