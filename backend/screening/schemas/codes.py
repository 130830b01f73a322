"""
Canonical Condition Vocabulary

Closed enumeration of condition codes shared by every extraction layer and
every scorer. New conditions are added as table rows here, never as ad hoc
flags on the profile.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

CONDITION_VOCABULARY_VERSION = "2024.2"


class RiskTier(str, Enum):
    """Clinical severity tier of a condition, most severe first."""
    SEVERE = "severe"
    HIGH = "high"
    MODERATE = "moderate"
    MINOR = "minor"
    MINIMAL = "minimal"


class ComplicationCategory(str, Enum):
    """Pregnancy complication categories used for counting and evidence."""
    HYPERTENSIVE = "hypertensive"
    DIABETES = "diabetes"
    PRETERM = "preterm"
    MEMBRANE = "membrane"
    PLACENTAL = "placental"
    GROWTH = "growth"
    HYPEREMESIS = "hyperemesis"
    HEMORRHAGE = "hemorrhage"
    CERVICAL = "cervical"
    CHOLESTASIS = "cholestasis"
    GASTROINTESTINAL = "gastrointestinal"
    OTHER = "other"


class InfectiousTest(str, Enum):
    """Infectious disease screens required before embryo transfer."""
    HIV_1 = "hiv_1"
    HIV_2 = "hiv_2"
    HIV_GROUP_O = "hiv_group_o"
    HEPATITIS_B_SURFACE_ANTIGEN = "hepatitis_b_surface_antigen"
    HEPATITIS_B_CORE_ANTIBODY = "hepatitis_b_core_antibody"
    HEPATITIS_C_ANTIBODY = "hepatitis_c_antibody"
    SYPHILIS = "syphilis"
    GONORRHEA = "gonorrhea"
    CHLAMYDIA = "chlamydia"


# Positive results in these tests are a high-risk finding; the rest are treatable
BLOOD_BORNE_TESTS = {
    InfectiousTest.HIV_1,
    InfectiousTest.HIV_2,
    InfectiousTest.HIV_GROUP_O,
    InfectiousTest.HEPATITIS_B_SURFACE_ANTIGEN,
    InfectiousTest.HEPATITIS_B_CORE_ANTIBODY,
    InfectiousTest.HEPATITIS_C_ANTIBODY,
}


class ConditionCode(str, Enum):
    """Canonical condition codes."""
    # Structural / contraindicating
    ABSENCE_OF_UTERUS = "absence_of_uterus"
    ACTIVE_CANCER = "active_cancer"
    CANCER_HISTORY = "cancer_history"
    UTERINE_ANOMALY = "uterine_anomaly"
    ASHERMAN_SYNDROME = "asherman_syndrome"
    UTERINE_FIBROIDS = "uterine_fibroids"
    ENDOMETRIOSIS = "endometriosis"
    PCOS = "pcos"

    # Cardiopulmonary
    PULMONARY_HYPERTENSION = "pulmonary_hypertension"
    CARDIAC_DISEASE = "cardiac_disease"
    PERIPARTUM_CARDIOMYOPATHY = "peripartum_cardiomyopathy"
    ASTHMA = "asthma"
    SEVERE_ASTHMA = "severe_asthma"

    # Metabolic / endocrine
    UNCONTROLLED_DIABETES = "uncontrolled_diabetes"
    PREGESTATIONAL_DIABETES = "pregestational_diabetes"
    THYROID_DISORDER = "thyroid_disorder"
    BARIATRIC_SURGERY = "bariatric_surgery"

    # Vascular / renal / hepatic / hematologic
    CHRONIC_HYPERTENSION = "chronic_hypertension"
    KIDNEY_DISEASE = "kidney_disease"
    LIVER_DISEASE = "liver_disease"
    VENOUS_THROMBOEMBOLISM = "venous_thromboembolism"
    THROMBOPHILIA = "thrombophilia"
    BLEEDING_DISORDER = "bleeding_disorder"
    ANEMIA = "anemia"
    SICKLE_CELL_DISEASE = "sickle_cell_disease"
    SICKLE_CELL_TRAIT = "sickle_cell_trait"
    THALASSEMIA = "thalassemia"

    # Immune / neurologic / gastrointestinal
    AUTOIMMUNE_DISEASE = "autoimmune_disease"
    INFLAMMATORY_BOWEL_DISEASE = "inflammatory_bowel_disease"
    EPILEPSY = "epilepsy"
    MIGRAINE = "migraine"
    GERD = "gerd"
    GASTROPARESIS = "gastroparesis"
    GALLSTONES = "gallstones"
    GASTRITIS = "gastritis"

    # Hypertensive disorders of pregnancy
    PREGNANCY_HYPERTENSION = "pregnancy_hypertension"
    PREECLAMPSIA = "preeclampsia"
    SEVERE_PREECLAMPSIA = "severe_preeclampsia"
    ECLAMPSIA = "eclampsia"
    HELLP_SYNDROME = "hellp_syndrome"

    # Other pregnancy complications
    GESTATIONAL_DIABETES = "gestational_diabetes"
    PRETERM_BIRTH = "preterm_birth"
    PRETERM_LABOR = "preterm_labor"
    PPROM = "pprom"
    PROM = "prom"
    CHORIOAMNIONITIS = "chorioamnionitis"
    PLACENTA_PREVIA = "placenta_previa"
    VASA_PREVIA = "vasa_previa"
    PLACENTAL_ABRUPTION = "placental_abruption"
    PLACENTA_ACCRETA = "placenta_accreta"
    RETAINED_PLACENTA = "retained_placenta"
    IUGR = "iugr"
    MACROSOMIA = "macrosomia"
    HYPEREMESIS = "hyperemesis"
    POSTPARTUM_HEMORRHAGE = "postpartum_hemorrhage"
    UTERINE_RUPTURE = "uterine_rupture"
    CERVICAL_INSUFFICIENCY = "cervical_insufficiency"
    CHOLESTASIS = "cholestasis"
    STILLBIRTH = "stillbirth"
    RECURRENT_MISCARRIAGE = "recurrent_miscarriage"
    ECTOPIC_PREGNANCY = "ectopic_pregnancy"
    AMNIOTIC_FLUID_DISORDER = "amniotic_fluid_disorder"
    SHOULDER_DYSTOCIA = "shoulder_dystocia"
    SEVERE_PERINEAL_LACERATION = "severe_perineal_laceration"
    POSTPARTUM_INFECTION = "postpartum_infection"
    MULTIPLE_GESTATION = "multiple_gestation"


@dataclass(frozen=True)
class ConditionDefinition:
    """Metadata for one canonical condition code."""
    label: str
    tier: RiskTier
    complication_category: Optional[ComplicationCategory] = None
    contraindicated: bool = False


C = ComplicationCategory
T = RiskTier

CONDITION_DEFINITIONS: Dict[ConditionCode, ConditionDefinition] = {
    ConditionCode.ABSENCE_OF_UTERUS: ConditionDefinition("Absence of uterus", T.SEVERE, contraindicated=True),
    ConditionCode.ACTIVE_CANCER: ConditionDefinition("Active cancer", T.SEVERE, contraindicated=True),
    ConditionCode.CANCER_HISTORY: ConditionDefinition("History of cancer", T.HIGH),
    ConditionCode.UTERINE_ANOMALY: ConditionDefinition("Uterine anomaly", T.HIGH),
    ConditionCode.ASHERMAN_SYNDROME: ConditionDefinition("Asherman syndrome", T.HIGH),
    ConditionCode.UTERINE_FIBROIDS: ConditionDefinition("Uterine fibroids", T.MINOR),
    ConditionCode.ENDOMETRIOSIS: ConditionDefinition("Endometriosis", T.MINOR),
    ConditionCode.PCOS: ConditionDefinition("Polycystic ovary syndrome", T.MINIMAL),

    ConditionCode.PULMONARY_HYPERTENSION: ConditionDefinition("Pulmonary hypertension", T.SEVERE),
    ConditionCode.CARDIAC_DISEASE: ConditionDefinition("Cardiac disease", T.SEVERE),
    ConditionCode.PERIPARTUM_CARDIOMYOPATHY: ConditionDefinition("Peripartum cardiomyopathy", T.SEVERE, C.OTHER),
    ConditionCode.ASTHMA: ConditionDefinition("Asthma", T.MINOR),
    ConditionCode.SEVERE_ASTHMA: ConditionDefinition("Severe asthma", T.HIGH),

    ConditionCode.UNCONTROLLED_DIABETES: ConditionDefinition("Uncontrolled diabetes", T.SEVERE),
    ConditionCode.PREGESTATIONAL_DIABETES: ConditionDefinition("Pre-existing diabetes", T.HIGH),
    ConditionCode.THYROID_DISORDER: ConditionDefinition("Thyroid disorder", T.MINOR),
    ConditionCode.BARIATRIC_SURGERY: ConditionDefinition("Prior bariatric surgery", T.MODERATE),

    ConditionCode.CHRONIC_HYPERTENSION: ConditionDefinition("Chronic hypertension", T.HIGH),
    ConditionCode.KIDNEY_DISEASE: ConditionDefinition("Kidney disease", T.HIGH),
    ConditionCode.LIVER_DISEASE: ConditionDefinition("Liver disease", T.HIGH),
    ConditionCode.VENOUS_THROMBOEMBOLISM: ConditionDefinition("Venous thromboembolism", T.HIGH),
    ConditionCode.THROMBOPHILIA: ConditionDefinition("Thrombophilia", T.HIGH),
    ConditionCode.BLEEDING_DISORDER: ConditionDefinition("Bleeding disorder", T.HIGH),
    ConditionCode.ANEMIA: ConditionDefinition("Anemia", T.MINIMAL),
    ConditionCode.SICKLE_CELL_DISEASE: ConditionDefinition("Sickle cell disease", T.HIGH),
    ConditionCode.SICKLE_CELL_TRAIT: ConditionDefinition("Sickle cell trait", T.MINIMAL),
    ConditionCode.THALASSEMIA: ConditionDefinition("Thalassemia", T.MODERATE),

    ConditionCode.AUTOIMMUNE_DISEASE: ConditionDefinition("Autoimmune disease", T.HIGH),
    ConditionCode.INFLAMMATORY_BOWEL_DISEASE: ConditionDefinition("Inflammatory bowel disease", T.MODERATE),
    ConditionCode.EPILEPSY: ConditionDefinition("Epilepsy / seizure disorder", T.HIGH),
    ConditionCode.MIGRAINE: ConditionDefinition("Migraine", T.MINIMAL),
    ConditionCode.GERD: ConditionDefinition("Gastroesophageal reflux", T.MINIMAL, C.GASTROINTESTINAL),
    ConditionCode.GASTROPARESIS: ConditionDefinition("Gastroparesis", T.SEVERE, C.GASTROINTESTINAL),
    ConditionCode.GALLSTONES: ConditionDefinition("Gallstones", T.MINOR, C.GASTROINTESTINAL),
    ConditionCode.GASTRITIS: ConditionDefinition("Gastritis", T.MINIMAL, C.GASTROINTESTINAL),

    ConditionCode.PREGNANCY_HYPERTENSION: ConditionDefinition("Pregnancy-induced hypertension", T.MODERATE, C.HYPERTENSIVE),
    ConditionCode.PREECLAMPSIA: ConditionDefinition("Preeclampsia", T.HIGH, C.HYPERTENSIVE),
    ConditionCode.SEVERE_PREECLAMPSIA: ConditionDefinition("Severe preeclampsia", T.SEVERE, C.HYPERTENSIVE),
    ConditionCode.ECLAMPSIA: ConditionDefinition("Eclampsia", T.SEVERE, C.HYPERTENSIVE),
    ConditionCode.HELLP_SYNDROME: ConditionDefinition("HELLP syndrome", T.SEVERE, C.HYPERTENSIVE),

    ConditionCode.GESTATIONAL_DIABETES: ConditionDefinition("Gestational diabetes", T.MODERATE, C.DIABETES),
    ConditionCode.PRETERM_BIRTH: ConditionDefinition("Preterm birth", T.HIGH, C.PRETERM),
    ConditionCode.PRETERM_LABOR: ConditionDefinition("Preterm labor", T.MODERATE, C.PRETERM),
    ConditionCode.PPROM: ConditionDefinition("Preterm premature rupture of membranes", T.HIGH, C.MEMBRANE),
    ConditionCode.PROM: ConditionDefinition("Premature rupture of membranes", T.MINOR, C.MEMBRANE),
    ConditionCode.CHORIOAMNIONITIS: ConditionDefinition("Chorioamnionitis", T.MODERATE, C.MEMBRANE),
    ConditionCode.PLACENTA_PREVIA: ConditionDefinition("Placenta previa", T.HIGH, C.PLACENTAL),
    ConditionCode.VASA_PREVIA: ConditionDefinition("Vasa previa", T.HIGH, C.PLACENTAL),
    ConditionCode.PLACENTAL_ABRUPTION: ConditionDefinition("Placental abruption", T.HIGH, C.PLACENTAL),
    ConditionCode.PLACENTA_ACCRETA: ConditionDefinition("Placenta accreta spectrum", T.SEVERE, C.PLACENTAL),
    ConditionCode.RETAINED_PLACENTA: ConditionDefinition("Retained placenta", T.MINOR, C.PLACENTAL),
    ConditionCode.IUGR: ConditionDefinition("Fetal growth restriction", T.MODERATE, C.GROWTH),
    ConditionCode.MACROSOMIA: ConditionDefinition("Fetal macrosomia", T.MINOR, C.GROWTH),
    ConditionCode.HYPEREMESIS: ConditionDefinition("Hyperemesis gravidarum", T.MODERATE, C.HYPEREMESIS),
    ConditionCode.POSTPARTUM_HEMORRHAGE: ConditionDefinition("Postpartum hemorrhage", T.HIGH, C.HEMORRHAGE),
    ConditionCode.UTERINE_RUPTURE: ConditionDefinition("Uterine rupture", T.SEVERE, C.OTHER, contraindicated=True),
    ConditionCode.CERVICAL_INSUFFICIENCY: ConditionDefinition("Cervical insufficiency", T.HIGH, C.CERVICAL),
    ConditionCode.CHOLESTASIS: ConditionDefinition("Intrahepatic cholestasis of pregnancy", T.MODERATE, C.CHOLESTASIS),
    ConditionCode.STILLBIRTH: ConditionDefinition("Stillbirth", T.HIGH, C.OTHER),
    ConditionCode.RECURRENT_MISCARRIAGE: ConditionDefinition("Recurrent pregnancy loss", T.MODERATE, C.OTHER),
    ConditionCode.ECTOPIC_PREGNANCY: ConditionDefinition("Ectopic pregnancy", T.MINOR, C.OTHER),
    ConditionCode.AMNIOTIC_FLUID_DISORDER: ConditionDefinition("Amniotic fluid disorder", T.MINOR, C.OTHER),
    ConditionCode.SHOULDER_DYSTOCIA: ConditionDefinition("Shoulder dystocia", T.MINOR, C.OTHER),
    ConditionCode.SEVERE_PERINEAL_LACERATION: ConditionDefinition("Third/fourth degree laceration", T.MINOR, C.OTHER),
    ConditionCode.POSTPARTUM_INFECTION: ConditionDefinition("Postpartum infection", T.MINOR, C.OTHER),
    ConditionCode.MULTIPLE_GESTATION: ConditionDefinition("Prior multiple gestation", T.MINIMAL),
}

# Conditions reviewed by maternal-fetal medicine as complex
COMPLEX_TIERS = {RiskTier.SEVERE, RiskTier.HIGH}


def definition_for(code: ConditionCode) -> ConditionDefinition:
    return CONDITION_DEFINITIONS[code]


def complication_category_for(code: ConditionCode) -> Optional[ComplicationCategory]:
    return CONDITION_DEFINITIONS[code].complication_category


def is_complex(code: ConditionCode) -> bool:
    return CONDITION_DEFINITIONS[code].tier in COMPLEX_TIERS
