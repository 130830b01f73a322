"""
MFM Referral Assessor

Estimates whether maternal-fetal medicine review is needed and how an MFM
is likely to view the candidate. Review for a surrogate uses a higher bar
than review of an elective pregnancy for oneself, so conditions that
would be accepted "with counseling" elsewhere are often declined here.

Findings come from the MFM_GUIDANCE table keyed by condition code, with
tier defaults for codes not listed. The table is authoritative.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..schemas.assessment import (
    FindingSeverity,
    MFMAssessment,
    MFMFinding,
    MFMLikelihood,
    MFMLikelihoodEstimate,
    MFMReviewLevel,
)
from ..schemas.codes import ConditionCode, RiskTier, definition_for, is_complex
from ..schemas.profile import CandidateProfile

F = FindingSeverity
CC = ConditionCode


@dataclass(frozen=True)
class MFMGuidance:
    """How an MFM views one risk factor."""
    category: str
    concern: str
    mfm_view: str
    approvability: str
    severity: FindingSeverity
    # Most MFMs decline surrogacy with this factor
    declines: bool = False
    questions: Tuple[str, ...] = ()
    documents: Tuple[str, ...] = ()


HYPERTENSION_QUESTIONS = (
    "When was hypertension diagnosed and what was the cause?",
    "Current blood pressure readings (home monitoring log if available)",
    "Any end-organ effects (kidney, heart, eyes)?",
)
HYPERTENSION_DOCUMENTS = (
    "Cardiology evaluation and clearance letter",
    "Renal function tests (creatinine, urinalysis)",
)
DIABETES_QUESTIONS = (
    "Recent hemoglobin A1c value",
    "Diet-controlled vs insulin-requiring?",
    "Any diabetic complications (retinopathy, neuropathy, nephropathy)?",
)
DIABETES_DOCUMENTS = (
    "Endocrinology consultation note",
    "Recent A1c and glucose logs",
)
CESAREAN_QUESTIONS = (
    "Operative reports from all cesarean deliveries",
    "Indications for each cesarean (emergency vs scheduled)",
    "Any intraoperative complications or difficult surgery",
)
CESAREAN_DOCUMENTS = (
    "Operative reports from all cesarean deliveries",
    "Pathology reports if placental abnormalities",
)
OBESITY_QUESTIONS = (
    "Recent glucose tolerance test or fasting glucose",
    "Sleep apnea screening/sleep study results",
)

MFM_GUIDANCE: Dict[ConditionCode, MFMGuidance] = {
    CC.PREGNANCY_HYPERTENSION: MFMGuidance(
        "Pregnancy-Induced Hypertension", "History of pregnancy-induced hypertension",
        "MFM will evaluate whether PIH was diet-controlled or required medication; recurrence risk is 15-25%.",
        "Usually approvable if it resolved postpartum, was not medication-requiring and did not progress to preeclampsia",
        F.MODERATE, questions=HYPERTENSION_QUESTIONS, documents=HYPERTENSION_DOCUMENTS,
    ),
    CC.CHRONIC_HYPERTENSION: MFMGuidance(
        "Chronic Hypertension", "History of chronic hypertension",
        "MFM will evaluate blood pressure control, pregnancy-safe medication, end-organ damage and "
        "superimposed preeclampsia risk (25-50%).",
        "Approvable only if well-controlled on pregnancy-compatible medication with no end-organ damage",
        F.HIGH, questions=HYPERTENSION_QUESTIONS, documents=HYPERTENSION_DOCUMENTS,
    ),
    CC.PREECLAMPSIA: MFMGuidance(
        "Preeclampsia", "Prior preeclampsia",
        "MFM will review onset, severity and delivery timing; recurrence risk is 15-25%.",
        "Often declined for surrogacy; mild late-onset disease may be approved with aspirin prophylaxis",
        F.HIGH, questions=HYPERTENSION_QUESTIONS, documents=HYPERTENSION_DOCUMENTS,
    ),
    CC.GESTATIONAL_DIABETES: MFMGuidance(
        "Gestational Diabetes History", "Previous gestational diabetes",
        "MFM will note 30-84% recurrence risk and order early glucose screening.",
        "Usually approved if diet-controlled only; insulin-requiring GDM may be declined by some MFMs",
        F.MODERATE, questions=DIABETES_QUESTIONS, documents=DIABETES_DOCUMENTS,
    ),
    CC.PREGESTATIONAL_DIABETES: MFMGuidance(
        "Diabetes Mellitus", "Pre-existing diabetes",
        "MFM will assess A1c (<6.5%), retinopathy, nephropathy and neuropathy; pre-existing diabetes raises "
        "anomaly, macrosomia and stillbirth risk.",
        "Type 1 or Type 2 diabetes is generally declined for surrogacy",
        F.HIGH, declines=True, questions=DIABETES_QUESTIONS, documents=DIABETES_DOCUMENTS,
    ),
    CC.UNCONTROLLED_DIABETES: MFMGuidance(
        "Diabetes Mellitus", "Uncontrolled diabetes",
        "Poor glycemic control carries major maternal and fetal risk.",
        "Declined for surrogacy",
        F.HIGH, declines=True, questions=DIABETES_QUESTIONS, documents=DIABETES_DOCUMENTS,
    ),
    CC.THYROID_DISORDER: MFMGuidance(
        "Thyroid Disorder", "Thyroid condition",
        "MFM will review TSH and Free T4 and confirm a stable medication dose.",
        "Approved if well-controlled on a stable dose with normal TSH",
        F.LOW, documents=("Recent TSH and Free T4 levels",),
    ),
    CC.AUTOIMMUNE_DISEASE: MFMGuidance(
        "Autoimmune Disease", "Autoimmune condition",
        "MFM will assess disease activity, teratogenic immunosuppressants and flare risk in pregnancy.",
        "Case-by-case; active disease or concerning antibodies are likely declined",
        F.HIGH, documents=("Rheumatology consultation note", "Antibody panel results"),
    ),
    CC.ASTHMA: MFMGuidance(
        "Asthma", "Asthma diagnosis",
        "Well-controlled asthma without recent exacerbations is acceptable.",
        "Approved if well-controlled on inhaled medications",
        F.LOW,
    ),
    CC.KIDNEY_DISEASE: MFMGuidance(
        "Kidney Disease", "Renal condition",
        "Chronic kidney disease raises preeclampsia, preterm delivery and renal decline risk.",
        "Generally declined unless very mild with normal function; nephrology clearance required",
        F.HIGH, declines=True, documents=("Renal function tests (creatinine, urinalysis)",),
    ),
    CC.HYPEREMESIS: MFMGuidance(
        "Hyperemesis Gravidarum", "Prior hyperemesis gravidarum",
        "Hyperemesis has a 15-80% recurrence rate; MFM will ask about hospitalization, PICC lines or TPN.",
        "Mild cases approvable; severe hyperemesis requiring TPN is often declined",
        F.MODERATE,
    ),
    CC.GASTROPARESIS: MFMGuidance(
        "Gastroparesis", "History of gastroparesis",
        "Gastroparesis often recurs or worsens in pregnancy.",
        "Usually declined for surrogacy due to maternal health concerns",
        F.HIGH, declines=True,
    ),
    CC.PLACENTA_ACCRETA: MFMGuidance(
        "Placenta Accreta Spectrum", "Prior placenta accreta",
        "High recurrence with risk of massive hemorrhage and hysterectomy.",
        "Most MFMs will not approve",
        F.HIGH, declines=True, documents=CESAREAN_DOCUMENTS,
    ),
    CC.UTERINE_RUPTURE: MFMGuidance(
        "Uterine Rupture", "Prior uterine rupture",
        "Recurrence risk is unacceptable for an elective pregnancy.",
        "Not approvable",
        F.HIGH, declines=True, documents=CESAREAN_DOCUMENTS,
    ),
}

# Recurrence notes folded into the previous-complications finding
RECURRENCE_NOTES: Dict[ConditionCode, str] = {
    CC.PREECLAMPSIA: "prior preeclampsia has 15-25% recurrence",
    CC.HYPEREMESIS: "hyperemesis gravidarum has 15-80% recurrence",
    CC.GASTROPARESIS: "gastroparesis often recurs or worsens in pregnancy",
    CC.GESTATIONAL_DIABETES: "gestational diabetes has 30-70% recurrence",
    CC.GERD: "GERD typically recurs in pregnancy",
}

TIER_SEVERITY: Dict[RiskTier, Optional[FindingSeverity]] = {
    RiskTier.SEVERE: F.HIGH,
    RiskTier.HIGH: F.HIGH,
    RiskTier.MODERATE: F.MODERATE,
    RiskTier.MINOR: F.LOW,
    RiskTier.MINIMAL: None,
}

BASE_QUESTIONS = [
    "Complete obstetric history including complications, gestational ages at delivery, birth weights",
    "Current medications and dosages",
    "Recent vital signs (blood pressure, weight)",
    "Family history of pregnancy complications, diabetes, hypertension",
    "Any hospitalizations or surgeries",
]

BASE_DOCUMENTS = [
    "Complete medical records from previous pregnancies and deliveries",
    "Recent physical examination with vital signs",
    "Current medication list",
    "Recent laboratory work (CBC, metabolic panel, thyroid function)",
]

REVIEW_SUMMARIES = {
    MFMReviewLevel.REQUIRED: "MFM consultation suggested before proceeding.",
    MFMReviewLevel.STRONGLY_RECOMMENDED: "MFM consultation suggested due to identified risk factors.",
    MFMReviewLevel.RECOMMENDED: "MFM consultation suggested for case-by-case evaluation.",
    MFMReviewLevel.NOT_REQUIRED: "MFM consultation not necessary for standard cases, but available if needed.",
}


def _condition_guidance(code: ConditionCode) -> Optional[MFMGuidance]:
    if code in MFM_GUIDANCE:
        return MFM_GUIDANCE[code]
    definition = definition_for(code)
    if definition.contraindicated:
        return MFMGuidance(
            definition.label, definition.label,
            "Condition precludes a safe carrier pregnancy.",
            "Not approvable", F.HIGH, declines=True,
        )
    severity = TIER_SEVERITY[definition.tier]
    if severity is None:
        return None
    return MFMGuidance(
        definition.label,
        f"History of {definition.label.lower()}",
        f"MFM will review records for {definition.label.lower()} ({definition.tier.value} risk tier).",
        "Most MFMs will not approve" if definition.tier == RiskTier.SEVERE else "Case-by-case evaluation",
        severity,
        declines=definition.tier == RiskTier.SEVERE,
    )


def estimate_likelihood(guidance: List[MFMGuidance]) -> MFMLikelihoodEstimate:
    if not guidance:
        return MFMLikelihoodEstimate(
            level=MFMLikelihood.LIKELY_APPROVE,
            description="No significant risk factors; MFM likely to approve",
            percentage="90-100%",
        )
    high = sum(1 for g in guidance if g.severity == F.HIGH)
    moderate = sum(1 for g in guidance if g.severity == F.MODERATE)
    if any(g.declines for g in guidance) or high >= 2:
        return MFMLikelihoodEstimate(
            level=MFMLikelihood.LIKELY_DENY,
            description="Significant risk factors present; MFM unlikely to approve without major mitigation",
            percentage="10-30%",
        )
    if high == 1:
        return MFMLikelihoodEstimate(
            level=MFMLikelihood.UNLIKELY_APPROVE,
            description="Concerning risk factor; MFM approval challenging but possible with optimal management",
            percentage="30-50%",
        )
    if moderate >= 2:
        return MFMLikelihoodEstimate(
            level=MFMLikelihood.POSSIBLY_APPROVE,
            description="Moderate risk factors; MFM may approve with close monitoring plan",
            percentage="50-70%",
        )
    return MFMLikelihoodEstimate(
        level=MFMLikelihood.LIKELY_APPROVE,
        description="Manageable risk factors; MFM likely to approve with appropriate counseling",
        percentage="70-90%",
    )


@dataclass
class MFMAssessor:
    """Builds the MFM assessment for a profile."""

    guidance_table: Dict[ConditionCode, MFMGuidance] = field(default_factory=lambda: dict(MFM_GUIDANCE))

    def assess(self, profile: CandidateProfile) -> MFMAssessment:
        guidance: List[MFMGuidance] = []
        guidance.extend(self._age_guidance(profile))
        guidance.extend(self._obstetric_guidance(profile))
        guidance.extend(self._bmi_guidance(profile))

        codes = profile.medical_conditions if "medical_conditions" not in profile.invalid_fields else []
        for code in codes:
            entry = self.guidance_table.get(code) or _condition_guidance(code)
            if entry is not None:
                guidance.append(entry)

        guidance.extend(self._complication_guidance(profile, codes))

        significant = sum(1 for g in guidance if g.severity in (F.MODERATE, F.HIGH))
        if significant >= 2:
            guidance.append(MFMGuidance(
                "Multiple Risk Factors",
                f"{significant} moderate or high-risk factors identified",
                "Multiple risk factors compound pregnancy risk; MFM will assess cumulative risk.",
                "MFM less likely to approve when 2+ significant risk factors are present",
                F.HIGH,
            ))

        history = profile.pregnancy_history
        complications = history.number_of_complications if history is not None else 0
        consultation_needed = (
            complications > 1
            or any(is_complex(code) for code in codes)
            or any(g.severity == F.HIGH for g in guidance)
        )

        if any(g.severity == F.HIGH or g.declines for g in guidance):
            review_level = MFMReviewLevel.REQUIRED
        elif consultation_needed:
            review_level = MFMReviewLevel.STRONGLY_RECOMMENDED
        elif guidance:
            review_level = MFMReviewLevel.RECOMMENDED
        else:
            review_level = MFMReviewLevel.NOT_REQUIRED

        likelihood = estimate_likelihood(guidance)
        findings = [
            MFMFinding(
                category=g.category,
                concern=g.concern,
                mfm_view=g.mfm_view,
                approvability=g.approvability,
                severity=g.severity,
            )
            for g in guidance
        ]

        summary = f"{REVIEW_SUMMARIES[review_level]} {likelihood.description}."
        if findings:
            categories = list(dict.fromkeys(f.category for f in findings))
            summary += f" Key areas of MFM focus: {', '.join(categories)}."

        return MFMAssessment(
            consultation_needed=consultation_needed,
            review_level=review_level,
            likelihood=likelihood,
            findings=findings,
            summary=summary,
            questions_to_ask=self._collect(BASE_QUESTIONS, [g.questions for g in guidance]),
            documentation_needed=self._collect(BASE_DOCUMENTS, [g.documents for g in guidance]),
        )

    # -------------------------------------------------------------------------
    # Non-condition findings
    # -------------------------------------------------------------------------

    def _age_guidance(self, profile: CandidateProfile) -> List[MFMGuidance]:
        age = profile.age if "age" not in profile.invalid_fields else None
        if age is None:
            return []
        if age > 42:
            return [MFMGuidance(
                "Age", f"Age {age} well above ideal range",
                "MFM will evaluate advanced maternal age risks: gestational diabetes, preeclampsia, "
                "placental complications and cesarean delivery.",
                "Age >42 is challenging; MFM likely to recommend against unless exceptionally healthy",
                F.HIGH,
            )]
        if age > 40:
            return [MFMGuidance(
                "Age", f"Age {age} above ideal range but within ASRM guidelines",
                "MFM will assess blood pressure, glucose tolerance and prior complications.",
                "Age 40-42 generally approvable with clean medical history",
                F.MODERATE,
            )]
        if age > 38:
            return [MFMGuidance(
                "Age", f"Age {age} approaching upper range",
                "Slightly increased risk; MFM will monitor for gestational diabetes and hypertension.",
                "Age 38-40 typically approved without issue",
                F.LOW,
            )]
        return []

    def _obstetric_guidance(self, profile: CandidateProfile) -> List[MFMGuidance]:
        history = profile.pregnancy_history if "pregnancy_history" not in profile.invalid_fields else None
        if history is None:
            return []
        guidance = []
        cesareans = history.number_of_cesareans
        if cesareans >= 4:
            guidance.append(MFMGuidance(
                "Cesarean History", f"{cesareans} previous cesarean deliveries",
                "Placenta accreta risk up to 40%, uterine rupture and hemorrhage risk.",
                "Four or more C-sections: most MFMs will not approve",
                F.HIGH, declines=True, questions=CESAREAN_QUESTIONS, documents=CESAREAN_DOCUMENTS,
            ))
        elif cesareans == 3:
            guidance.append(MFMGuidance(
                "Cesarean History", "3 previous cesarean deliveries",
                "Placenta accreta, uterine rupture and hemorrhage risk rise sharply with a third cesarean.",
                "May approve with extensive counseling and delivery at a tertiary center; some MFMs will not",
                F.HIGH, questions=CESAREAN_QUESTIONS, documents=CESAREAN_DOCUMENTS,
            ))
        elif cesareans == 2:
            guidance.append(MFMGuidance(
                "Cesarean History", "2 previous cesarean deliveries",
                "Increased risk of placenta previa and accreta (3-11%).",
                "Two C-sections usually approved with counseling and surgical history review",
                F.MODERATE, questions=CESAREAN_QUESTIONS, documents=CESAREAN_DOCUMENTS,
            ))

        if history.total_deliveries > 5:
            guidance.append(MFMGuidance(
                "Grand Multiparity", f"{history.total_deliveries} previous deliveries",
                "Increased risk of postpartum hemorrhage, placental abnormalities and uterine atony.",
                "Approvable if previous deliveries were uncomplicated",
                F.MODERATE,
            ))
        return guidance

    def _bmi_guidance(self, profile: CandidateProfile) -> List[MFMGuidance]:
        bmi = profile.bmi if "bmi" not in profile.invalid_fields else None
        if bmi is None:
            return []
        shown = f"{bmi:g}"
        if bmi >= 40:
            return [MFMGuidance(
                "Obesity Class III", f"BMI {shown}",
                "Very high risk of gestational diabetes, preeclampsia, cesarean and anesthesia complications.",
                "BMI >=40: most MFMs will not approve",
                F.HIGH, declines=True, questions=OBESITY_QUESTIONS,
            )]
        if bmi >= 35:
            return [MFMGuidance(
                "Obesity Class II", f"BMI {shown}",
                "Markedly increased risk of gestational diabetes, preeclampsia and cesarean delivery.",
                "BMI 35-39.9: some MFMs approve with metabolic workup; many decline",
                F.HIGH, questions=OBESITY_QUESTIONS,
            )]
        if bmi >= 32:
            return [MFMGuidance(
                "Obesity Class I", f"BMI {shown}",
                "Increased risk of gestational diabetes, hypertension and cesarean delivery.",
                "BMI 32-34.9: usually approved with glucose tolerance test and blood pressure monitoring",
                F.MODERATE, questions=OBESITY_QUESTIONS,
            )]
        if bmi < 18.5:
            return [MFMGuidance(
                "Underweight", f"BMI {shown}",
                "MFM will assess nutrition, eating disorder history and growth restriction risk.",
                "Approvable if nutritionally healthy",
                F.MODERATE,
            )]
        return []

    def _complication_guidance(self, profile: CandidateProfile, codes: List[ConditionCode]) -> List[MFMGuidance]:
        history = profile.pregnancy_history
        if history is None or history.number_of_complications <= 0:
            return []
        notes = [RECURRENCE_NOTES[code] for code in codes if code in RECURRENCE_NOTES]
        view = "MFM will require detailed obstetric history and a recurrence risk assessment."
        if notes:
            view += " " + "; ".join(notes) + "."
        return [MFMGuidance(
            "Previous Pregnancy Complications",
            f"{history.number_of_complications} previous pregnancy complication(s)",
            view,
            "Mild complications may be approved with evaluation; severe complications are typically declined",
            F.MODERATE,
        )]

    @staticmethod
    def _collect(base: List[str], extra: List[Tuple[str, ...]]) -> List[str]:
        items = list(base)
        for group in extra:
            for item in group:
                if item not in items:
                    items.append(item)
        return items


# Global instance
MFM_ASSESSOR = MFMAssessor()
