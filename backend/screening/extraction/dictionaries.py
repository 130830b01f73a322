"""
Keyword dictionaries for deterministic extraction.

Every condition keyword maps to exactly one canonical ConditionCode. Matching
is case-insensitive and word-boundary aware; when keywords overlap, the
longest span wins (so "gestational diabetes" never also yields "diabetes").
"""

from dataclasses import dataclass, field
from typing import Dict, List

from ..schemas.codes import ConditionCode as CC, InfectiousTest


@dataclass
class MedicalDictionary:
    """Condition keywords and abbreviations keyed by canonical code."""

    conditions: Dict[CC, List[str]] = field(default_factory=lambda: {
        CC.ABSENCE_OF_UTERUS: [
            "absence of uterus", "absent uterus", "no uterus", "hysterectomy",
            "s/p hysterectomy", "status post hysterectomy", "uterine agenesis",
            "mullerian agenesis", "mrkh", "mayer-rokitansky-kuster-hauser",
        ],
        CC.ACTIVE_CANCER: [
            "active cancer", "current cancer", "metastatic disease", "metastatic cancer",
            "undergoing chemotherapy", "on chemotherapy", "receiving chemotherapy",
            "undergoing radiation", "active malignancy",
        ],
        CC.CANCER_HISTORY: [
            "cancer", "carcinoma", "malignancy", "lymphoma", "leukemia", "melanoma",
            "sarcoma", "history of cancer", "cancer survivor", "cervical cancer",
            "breast cancer", "thyroid cancer", "hodgkin",
        ],
        CC.UTERINE_ANOMALY: [
            "bicornuate uterus", "septate uterus", "unicornuate uterus", "uterus didelphys",
            "didelphic uterus", "uterine anomaly", "mullerian anomaly", "uterine septum",
            "arcuate uterus", "t-shaped uterus",
        ],
        CC.ASHERMAN_SYNDROME: [
            "asherman syndrome", "asherman's syndrome", "ashermans", "intrauterine adhesions",
            "uterine synechiae", "uterine scarring",
        ],
        CC.UTERINE_FIBROIDS: [
            "fibroid", "fibroids", "uterine fibroids", "leiomyoma", "leiomyomas",
            "myoma", "myomectomy",
        ],
        CC.ENDOMETRIOSIS: [
            "endometriosis", "endometrioma", "adenomyosis", "chocolate cyst",
        ],
        CC.PCOS: [
            "pcos", "polycystic ovary syndrome", "polycystic ovarian syndrome",
            "polycystic ovaries", "stein-leventhal",
        ],
        CC.PULMONARY_HYPERTENSION: [
            "pulmonary hypertension", "pulmonary arterial hypertension", "pah",
            "eisenmenger", "eisenmenger syndrome", "cor pulmonale",
            "elevated pulmonary pressures",
        ],
        CC.CARDIAC_DISEASE: [
            "severe cardiac disease", "cardiac disease", "heart disease", "heart failure",
            "chf", "congestive heart failure", "cardiomyopathy", "dilated cardiomyopathy",
            "congenital heart disease", "valvular heart disease", "mitral stenosis",
            "aortic stenosis", "myocardial infarction", "coronary artery disease", "cad",
            "marfan syndrome", "marfan", "arrhythmia", "long qt",
        ],
        CC.PERIPARTUM_CARDIOMYOPATHY: [
            "peripartum cardiomyopathy", "postpartum cardiomyopathy", "ppcm",
        ],
        CC.ASTHMA: [
            "asthma", "asthmatic", "mild asthma", "exercise induced asthma",
            "exercise-induced asthma", "reactive airway disease",
        ],
        CC.SEVERE_ASTHMA: [
            "severe asthma", "steroid dependent asthma", "steroid-dependent asthma",
            "status asthmaticus", "asthma requiring intubation", "persistent severe asthma",
        ],
        CC.UNCONTROLLED_DIABETES: [
            "uncontrolled diabetes", "poorly controlled diabetes", "diabetic ketoacidosis",
            "dka", "brittle diabetes", "uncontrolled dm",
        ],
        CC.PREGESTATIONAL_DIABETES: [
            "diabetes", "diabetes mellitus", "diabetic", "type 1 diabetes", "type 2 diabetes",
            "type i diabetes", "type ii diabetes", "t1dm", "t2dm", "dm1", "dm2", "iddm",
            "niddm", "pregestational diabetes", "pre-existing diabetes", "preexisting diabetes",
            "insulin dependent diabetes", "controlled diabetes",
        ],
        CC.THYROID_DISORDER: [
            "thyroid disorder", "thyroid disease", "hypothyroidism", "hypothyroid",
            "hyperthyroidism", "hyperthyroid", "hashimoto", "hashimoto's", "hashimotos",
            "graves disease", "graves' disease", "thyroiditis", "goiter", "levothyroxine",
            "synthroid",
        ],
        CC.BARIATRIC_SURGERY: [
            "bariatric surgery", "gastric bypass", "gastric sleeve", "sleeve gastrectomy",
            "roux-en-y", "lap band", "lap-band", "gastric banding", "weight loss surgery",
        ],
        CC.CHRONIC_HYPERTENSION: [
            "chronic hypertension", "essential hypertension", "chronic htn",
            "pre-existing hypertension", "preexisting hypertension", "on antihypertensives",
            "chronic high blood pressure",
        ],
        CC.KIDNEY_DISEASE: [
            "kidney disease", "renal disease", "ckd", "chronic kidney disease",
            "renal insufficiency", "nephrotic syndrome", "glomerulonephritis",
            "polycystic kidney", "polycystic kidney disease", "renal failure",
            "kidney transplant", "lupus nephritis", "iga nephropathy",
        ],
        CC.LIVER_DISEASE: [
            "liver disease", "hepatic disease", "cirrhosis", "fatty liver", "nafld",
            "autoimmune hepatitis", "portal hypertension", "wilson disease",
        ],
        CC.VENOUS_THROMBOEMBOLISM: [
            "dvt", "deep vein thrombosis", "deep venous thrombosis", "pulmonary embolism",
            "pulmonary embolus", "vte", "venous thromboembolism", "blood clot",
            "blood clots", "on anticoagulation", "lovenox",
        ],
        CC.THROMBOPHILIA: [
            "thrombophilia", "factor v leiden", "prothrombin gene mutation",
            "protein s deficiency", "protein c deficiency", "antithrombin deficiency",
            "antiphospholipid syndrome", "antiphospholipid antibody syndrome", "apls",
            "mthfr",
        ],
        CC.BLEEDING_DISORDER: [
            "bleeding disorder", "von willebrand", "von willebrand disease", "vwd",
            "hemophilia carrier", "thrombocytopenia", "itp", "immune thrombocytopenia",
            "low platelets",
        ],
        CC.ANEMIA: [
            "anemia", "anaemia", "anemic", "iron deficiency", "iron deficiency anemia",
            "low hemoglobin", "low iron",
        ],
        CC.SICKLE_CELL_DISEASE: [
            "sickle cell disease", "sickle cell anemia", "sickle cell", "hbss", "hb ss",
        ],
        CC.SICKLE_CELL_TRAIT: [
            "sickle cell trait", "hbas", "hb as", "sickle trait",
        ],
        CC.THALASSEMIA: [
            "thalassemia", "thalassaemia", "beta thalassemia", "alpha thalassemia",
            "thalassemia minor", "thalassemia trait",
        ],
        CC.AUTOIMMUNE_DISEASE: [
            "autoimmune disease", "autoimmune disorder", "lupus", "sle",
            "systemic lupus erythematosus", "rheumatoid arthritis", "sjogren",
            "sjogren's", "scleroderma", "multiple sclerosis", "myasthenia gravis",
            "celiac disease", "psoriatic arthritis", "vasculitis",
        ],
        CC.INFLAMMATORY_BOWEL_DISEASE: [
            "inflammatory bowel disease", "ibd", "crohn's disease", "crohn's", "crohns",
            "crohn disease", "ulcerative colitis",
        ],
        CC.EPILEPSY: [
            "epilepsy", "epileptic", "seizure disorder", "seizures", "seizure",
            "on antiepileptics", "keppra", "lamotrigine", "levetiracetam",
        ],
        CC.MIGRAINE: [
            "migraine", "migraines", "migraine headaches", "chronic headaches",
        ],
        CC.GERD: [
            "gerd", "acid reflux", "gastroesophageal reflux", "gastroesophageal reflux disease",
            "reflux", "heartburn",
        ],
        CC.GASTROPARESIS: [
            "gastroparesis", "delayed gastric emptying", "diabetic gastroparesis",
        ],
        CC.GALLSTONES: [
            "gallstones", "gallstone", "cholelithiasis", "cholecystitis", "cholecystectomy",
            "gallbladder removal", "gallbladder removed", "biliary colic",
        ],
        CC.GASTRITIS: [
            "gastritis", "peptic ulcer", "stomach ulcer", "h. pylori", "h pylori",
        ],
        CC.PREGNANCY_HYPERTENSION: [
            "gestational hypertension", "pregnancy induced hypertension",
            "pregnancy-induced hypertension", "pih", "ghtn", "hypertension", "htn",
            "high blood pressure", "elevated blood pressure", "hypertensive disorder of pregnancy",
        ],
        CC.PREECLAMPSIA: [
            "preeclampsia", "pre-eclampsia", "pre eclampsia", "preeclamptic", "toxemia",
            "postpartum preeclampsia", "mild preeclampsia", "preeclampsia without severe features",
        ],
        CC.SEVERE_PREECLAMPSIA: [
            "severe preeclampsia", "severe pre-eclampsia", "preeclampsia with severe features",
            "pre-eclampsia with severe features", "early onset preeclampsia",
            "early-onset preeclampsia",
        ],
        CC.ECLAMPSIA: [
            "eclampsia", "eclamptic", "eclamptic seizure",
        ],
        CC.HELLP_SYNDROME: [
            "hellp", "hellp syndrome",
        ],
        CC.GESTATIONAL_DIABETES: [
            "gestational diabetes", "gestational diabetes mellitus", "gdm", "a1gdm", "a2gdm",
            "gdma1", "gdma2", "gdm a1", "gdm a2", "diet controlled gdm", "diet-controlled gdm",
            "insulin requiring gdm", "glucose intolerance of pregnancy", "failed glucose tolerance test",
        ],
        CC.PRETERM_BIRTH: [
            "preterm birth", "preterm delivery", "premature birth", "premature delivery",
            "delivered preterm", "delivered prematurely", "ptb", "spontaneous preterm birth",
            "born premature", "premature baby", "nicu stay",
        ],
        CC.PRETERM_LABOR: [
            "preterm labor", "preterm labour", "premature labor", "premature labour",
            "ptl", "threatened preterm labor", "preterm contractions",
        ],
        CC.PPROM: [
            "pprom", "preterm premature rupture of membranes", "preterm rupture of membranes",
            "preterm prom",
        ],
        CC.PROM: [
            "prom", "premature rupture of membranes", "prolonged rupture of membranes",
        ],
        CC.CHORIOAMNIONITIS: [
            "chorioamnionitis", "chorio", "intraamniotic infection", "intra-amniotic infection",
            "triple i",
        ],
        CC.PLACENTA_PREVIA: [
            "placenta previa", "placenta praevia", "previa", "low lying placenta",
            "low-lying placenta", "marginal previa", "complete previa",
        ],
        CC.VASA_PREVIA: [
            "vasa previa", "vasa praevia",
        ],
        CC.PLACENTAL_ABRUPTION: [
            "placental abruption", "abruptio placentae", "abruption", "placental separation",
        ],
        CC.PLACENTA_ACCRETA: [
            "placenta accreta", "accreta", "placenta increta", "increta", "placenta percreta",
            "percreta", "placenta accreta spectrum", "morbidly adherent placenta",
        ],
        CC.RETAINED_PLACENTA: [
            "retained placenta", "manual removal of placenta", "retained products of conception",
            "rpoc", "manual extraction of placenta",
        ],
        CC.IUGR: [
            "iugr", "fgr", "intrauterine growth restriction", "fetal growth restriction",
            "growth restriction", "sga", "small for gestational age",
        ],
        CC.MACROSOMIA: [
            "macrosomia", "macrosomic", "lga", "large for gestational age",
        ],
        CC.HYPEREMESIS: [
            "hyperemesis", "hyperemesis gravidarum", "severe nausea and vomiting",
            "intractable vomiting",
        ],
        CC.POSTPARTUM_HEMORRHAGE: [
            "postpartum hemorrhage", "postpartum haemorrhage", "pph", "obstetric hemorrhage",
            "hemorrhage", "haemorrhage", "blood transfusion", "transfusion", "transfused",
            "uterine atony", "excessive bleeding after delivery",
        ],
        CC.UTERINE_RUPTURE: [
            "uterine rupture", "ruptured uterus", "uterine dehiscence", "scar dehiscence",
        ],
        CC.CERVICAL_INSUFFICIENCY: [
            "cervical insufficiency", "incompetent cervix", "cervical incompetence",
            "cerclage", "short cervix", "shortened cervix",
        ],
        CC.CHOLESTASIS: [
            "cholestasis", "icp", "intrahepatic cholestasis", "intrahepatic cholestasis of pregnancy",
            "obstetric cholestasis",
        ],
        CC.STILLBIRTH: [
            "stillbirth", "stillborn", "still birth", "iufd", "intrauterine fetal demise",
            "fetal demise",
        ],
        CC.RECURRENT_MISCARRIAGE: [
            "recurrent miscarriage", "recurrent miscarriages", "recurrent pregnancy loss",
            "habitual abortion", "multiple miscarriages",
        ],
        CC.ECTOPIC_PREGNANCY: [
            "ectopic pregnancy", "ectopic", "tubal pregnancy", "salpingectomy",
        ],
        CC.AMNIOTIC_FLUID_DISORDER: [
            "polyhydramnios", "oligohydramnios", "low amniotic fluid", "excess amniotic fluid",
        ],
        CC.SHOULDER_DYSTOCIA: [
            "shoulder dystocia",
        ],
        CC.SEVERE_PERINEAL_LACERATION: [
            "third degree laceration", "fourth degree laceration", "third-degree laceration",
            "fourth-degree laceration", "3rd degree tear", "4th degree tear",
            "obstetric anal sphincter injury",
        ],
        CC.POSTPARTUM_INFECTION: [
            "endometritis", "postpartum infection", "wound infection", "postpartum endometritis",
        ],
        CC.MULTIPLE_GESTATION: [
            "twin pregnancy", "twins", "triplets", "multiple gestation", "di/di twins",
            "mono/di twins",
        ],
    })

    # Negation cues that cancel a mention in the same clause
    negation_terms: List[str] = field(default_factory=lambda: [
        "no", "not", "none", "without", "absence of", "negative for",
        "denies", "denied", "deny", "no history of", "no evidence of", "ruled out",
        "never had", "never", "free of", "no prior", "no known", "non",
    ])

    # Phrases asserting there is nothing to record for medical conditions
    negative_history_phrases: List[str] = field(default_factory=lambda: [
        "no complications", "uncomplicated", "no medical history", "no significant medical history",
        "no past medical history", "pmh negative", "pmh: none", "no chronic conditions",
        "no medical conditions", "healthy", "unremarkable", "no known medical problems",
        "no medical problems", "no health problems", "no medical issues", "no health issues",
        "no significant pmh", "pmh noncontributory", "no past medical problems",
    ])

    # Psychological screening attributes
    psychological_terms: Dict[str, List[str]] = field(default_factory=lambda: {
        "coercion_indicated": [
            "coerced", "coercion", "pressured into surrogacy", "being pressured",
            "forced to be a surrogate",
        ],
        "psychotropic_medication": [
            "psychotropic", "ssri", "snri", "sertraline", "zoloft", "fluoxetine", "prozac",
            "escitalopram", "lexapro", "citalopram", "bupropion", "wellbutrin",
            "antidepressant", "antidepressants", "antipsychotic", "lithium",
        ],
        "bipolar_or_psychosis": [
            "bipolar", "bipolar disorder", "schizophrenia", "schizoaffective", "psychosis",
            "psychotic",
        ],
        "major_depression": [
            "major depression", "major depressive disorder", "mdd", "severe depression",
            "postpartum depression", "suicidal", "suicide attempt", "depression",
        ],
        "substance_abuse": [
            "substance abuse", "substance use disorder", "addiction", "opioid use disorder",
            "alcoholism", "rehab",
        ],
        "eating_disorder": [
            "eating disorder", "anorexia", "anorexia nervosa", "bulimia", "binge eating",
        ],
        "anxiety": [
            "anxiety", "generalized anxiety", "generalized anxiety disorder", "panic disorder",
            "panic attacks",
        ],
        "abuse_history": [
            "history of abuse", "domestic violence", "sexual abuse", "physical abuse",
            "intimate partner violence", "ipv",
        ],
    })

    # Support-system phrases; the first list sets the attribute False
    support_absent_terms: List[str] = field(default_factory=lambda: [
        "no support system", "lacks support", "no family support", "limited support",
        "isolated", "no social support",
    ])
    support_present_terms: List[str] = field(default_factory=lambda: [
        "support system", "supportive partner", "supportive husband", "supportive family",
        "family support", "strong support",
    ])

    # Lifestyle attributes: phrases that set the flag True / False
    lifestyle_positive_terms: Dict[str, List[str]] = field(default_factory=lambda: {
        "current_smoker": [
            "current smoker", "smoker", "smokes", "smoking", "cigarettes", "tobacco use",
            "vapes", "vaping", "nicotine",
        ],
        "excessive_alcohol": [
            "excessive alcohol", "heavy drinking", "heavy drinker", "alcohol abuse",
            "binge drinking", "drinks daily", "etoh abuse",
        ],
        "drug_use": [
            "drug use", "illicit drugs", "illicit drug use", "recreational drugs", "cocaine",
            "heroin", "methamphetamine", "marijuana", "cannabis", "ivdu",
        ],
        "recent_tattoos": [
            "recent tattoo", "new tattoo", "recent piercing", "new piercing", "tattoo last",
        ],
    })
    lifestyle_negative_terms: Dict[str, List[str]] = field(default_factory=lambda: {
        "current_smoker": [
            "non-smoker", "nonsmoker", "non smoker", "never smoker", "does not smoke",
            "doesn't smoke", "quit smoking", "former smoker", "ex-smoker",
        ],
        "excessive_alcohol": [
            "social drinker", "occasional alcohol", "rare alcohol", "does not drink",
            "doesn't drink", "no alcohol",
        ],
        "drug_use": [
            "no drug use", "no illicit drugs", "no recreational drugs",
        ],
        "recent_tattoos": [
            "no recent tattoos", "no tattoos",
        ],
    })

    environmental_terms: Dict[str, List[str]] = field(default_factory=lambda: {
        "housing_instability": [
            "homeless", "unstable housing", "housing instability", "eviction", "evicted",
            "living in a shelter", "couch surfing",
        ],
        "relationship_instability": [
            "unstable relationship", "relationship problems", "going through a divorce",
            "divorce pending", "recently separated", "marital problems",
        ],
        "partner_not_supportive": [
            "partner not supportive", "unsupportive partner", "partner opposes",
            "husband opposes", "partner does not support", "husband does not support",
        ],
        "legal_issues": [
            "legal issues", "pending charges", "on probation", "probation", "incarcerated",
            "custody dispute", "criminal record",
        ],
        "employment_instability": [
            "unemployed", "lost her job", "lost job", "job loss", "unstable employment",
            "between jobs",
        ],
        "financial_instability": [
            "financial hardship", "financial difficulties", "financial strain",
            "bankruptcy", "significant debt", "behind on rent",
        ],
    })

    # Infectious disease screening tokens keyed by test
    infectious_tests: Dict[InfectiousTest, List[str]] = field(default_factory=lambda: {
        InfectiousTest.HIV_1: ["hiv", "hiv-1", "hiv 1", "hiv1", "hiv 1/2", "hiv-1/2"],
        InfectiousTest.HIV_2: ["hiv", "hiv-2", "hiv 2", "hiv2", "hiv 1/2", "hiv-1/2"],
        InfectiousTest.HIV_GROUP_O: ["hiv group o", "hiv-o", "hiv o"],
        InfectiousTest.HEPATITIS_B_SURFACE_ANTIGEN: [
            "hbsag", "hepatitis b surface antigen", "hep b surface antigen", "hepatitis b", "hep b",
        ],
        InfectiousTest.HEPATITIS_B_CORE_ANTIBODY: [
            "anti-hbc", "hbcab", "hepatitis b core antibody", "hep b core", "hepatitis b core",
        ],
        InfectiousTest.HEPATITIS_C_ANTIBODY: [
            "hcv", "hepatitis c", "hep c", "anti-hcv", "hcv antibody",
        ],
        InfectiousTest.SYPHILIS: ["syphilis", "rpr", "vdrl", "treponemal", "treponema pallidum"],
        InfectiousTest.GONORRHEA: ["gonorrhea", "gonorrhoea", "neisseria gonorrhoeae", "ng naat"],
        InfectiousTest.CHLAMYDIA: ["chlamydia", "chlamydia trachomatis", "ct naat"],
    })

    # Phrases that document the whole panel at once
    infectious_panel_terms: List[str] = field(default_factory=lambda: [
        "infectious disease panel", "infectious disease screening", "id panel",
        "std panel", "sti panel", "fda donor screening", "donor eligibility panel",
    ])

    positive_result_terms: List[str] = field(default_factory=lambda: [
        "positive", "reactive", "detected",
    ])
    negative_result_terms: List[str] = field(default_factory=lambda: [
        "negative", "non-reactive", "nonreactive", "not detected", "neg",
    ])


# Global instance
MEDICAL_DICTIONARY = MedicalDictionary()
