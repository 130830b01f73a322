"""
Curated medical glossary for Layer 2.

Each entry pairs a lay or clinical phrase with a definition and, where the
phrase names a condition, the canonical code it resolves to. Entries without
a code are reference terms only (served by the glossary endpoint).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..schemas.codes import CONDITION_DEFINITIONS, ConditionCode as CC, RiskTier

PREGNANCY = "Pregnancy Complications"
CHRONIC = "Chronic Conditions"
LAY = "Lay Descriptions"
OBSTETRIC = "Obstetric Terms"
SCREENING = "Screening Terms"


@dataclass(frozen=True)
class GlossaryEntry:
    term: str
    definition: str
    category: str
    code: Optional[CC] = None

    @property
    def severity(self) -> Optional[RiskTier]:
        if self.code is None:
            return None
        return CONDITION_DEFINITIONS[self.code].tier


def _e(term: str, definition: str, category: str, code: Optional[CC] = None) -> GlossaryEntry:
    return GlossaryEntry(term, definition, category, code)


@dataclass
class MedicalGlossary:
    """Glossary terms grouped by display category."""

    entries: List[GlossaryEntry] = field(default_factory=lambda: [
        # ----- Hypertensive disorders -----
        _e("toxaemia", "Older term for preeclampsia.", PREGNANCY, CC.PREECLAMPSIA),
        _e("toxemia of pregnancy", "Older term for preeclampsia.", PREGNANCY, CC.PREECLAMPSIA),
        _e("pregnancy induced high blood pressure", "Hypertension first appearing after 20 weeks of pregnancy.", PREGNANCY, CC.PREGNANCY_HYPERTENSION),
        _e("high blood pressure in pregnancy", "Hypertension during pregnancy.", LAY, CC.PREGNANCY_HYPERTENSION),
        _e("high blood pressure during pregnancy", "Hypertension during pregnancy.", LAY, CC.PREGNANCY_HYPERTENSION),
        _e("blood pressure problems during pregnancy", "Hypertensive disorder of pregnancy.", LAY, CC.PREGNANCY_HYPERTENSION),
        _e("blood pressure issues in pregnancy", "Hypertensive disorder of pregnancy.", LAY, CC.PREGNANCY_HYPERTENSION),
        _e("gestational hypertensive disorder", "Hypertension arising in pregnancy without proteinuria.", PREGNANCY, CC.PREGNANCY_HYPERTENSION),
        _e("protein in urine and high blood pressure", "Classic presentation of preeclampsia.", LAY, CC.PREECLAMPSIA),
        _e("superimposed preeclampsia", "Preeclampsia developing on chronic hypertension.", PREGNANCY, CC.PREECLAMPSIA),
        _e("preeclampsia with hellp", "Preeclampsia complicated by hemolysis, elevated liver enzymes and low platelets.", PREGNANCY, CC.HELLP_SYNDROME),
        _e("hemolysis elevated liver enzymes low platelets", "Expanded name of HELLP syndrome.", PREGNANCY, CC.HELLP_SYNDROME),
        _e("seizure from preeclampsia", "Eclampsia.", LAY, CC.ECLAMPSIA),
        _e("magnesium for blood pressure", "Magnesium sulfate given for severe preeclampsia.", LAY, CC.SEVERE_PREECLAMPSIA),
        _e("magnesium sulfate", "Seizure prophylaxis used for severe preeclampsia.", PREGNANCY, CC.SEVERE_PREECLAMPSIA),

        # ----- Diabetes -----
        _e("pregnancy diabetes", "Diabetes first diagnosed during pregnancy.", LAY, CC.GESTATIONAL_DIABETES),
        _e("diabetes while pregnant", "Diabetes first diagnosed during pregnancy.", LAY, CC.GESTATIONAL_DIABETES),
        _e("diabetes during pregnancy", "Diabetes first diagnosed during pregnancy.", LAY, CC.GESTATIONAL_DIABETES),
        _e("sugar in pregnancy", "Lay description of gestational diabetes.", LAY, CC.GESTATIONAL_DIABETES),
        _e("high blood sugar in pregnancy", "Lay description of gestational diabetes.", LAY, CC.GESTATIONAL_DIABETES),
        _e("blood sugar problems during pregnancy", "Lay description of gestational diabetes.", LAY, CC.GESTATIONAL_DIABETES),
        _e("failed glucose test", "Abnormal glucose challenge in pregnancy.", LAY, CC.GESTATIONAL_DIABETES),
        _e("failed the glucose test", "Abnormal glucose challenge in pregnancy.", LAY, CC.GESTATIONAL_DIABETES),
        _e("abnormal ogtt", "Abnormal oral glucose tolerance test.", PREGNANCY, CC.GESTATIONAL_DIABETES),
        _e("insulin during pregnancy", "Insulin-treated gestational diabetes.", LAY, CC.GESTATIONAL_DIABETES),
        _e("diet controlled diabetes in pregnancy", "Class A1 gestational diabetes.", PREGNANCY, CC.GESTATIONAL_DIABETES),
        _e("sugar diabetes", "Lay term for diabetes mellitus.", LAY, CC.PREGESTATIONAL_DIABETES),
        _e("insulin pump", "Continuous insulin delivery for pre-existing diabetes.", CHRONIC, CC.PREGESTATIONAL_DIABETES),
        _e("elevated a1c", "Raised glycated hemoglobin suggesting poor glucose control.", CHRONIC, CC.UNCONTROLLED_DIABETES),

        # ----- Preterm and membranes -----
        _e("baby came early", "Preterm birth.", LAY, CC.PRETERM_BIRTH),
        _e("baby was born early", "Preterm birth.", LAY, CC.PRETERM_BIRTH),
        _e("born early", "Preterm birth.", LAY, CC.PRETERM_BIRTH),
        _e("delivered early", "Preterm birth.", LAY, CC.PRETERM_BIRTH),
        _e("early delivery", "Preterm birth.", LAY, CC.PRETERM_BIRTH),
        _e("premature baby", "Infant born before 37 weeks.", LAY, CC.PRETERM_BIRTH),
        _e("preemie", "Infant born before 37 weeks.", LAY, CC.PRETERM_BIRTH),
        _e("delivered at 34 weeks", "Late preterm birth.", LAY, CC.PRETERM_BIRTH),
        _e("delivered at 32 weeks", "Moderate preterm birth.", LAY, CC.PRETERM_BIRTH),
        _e("early contractions", "Preterm labor.", LAY, CC.PRETERM_LABOR),
        _e("went into labor early", "Preterm labor.", LAY, CC.PRETERM_LABOR),
        _e("bed rest for contractions", "Management of threatened preterm labor.", LAY, CC.PRETERM_LABOR),
        _e("tocolysis", "Medication to suppress preterm contractions.", PREGNANCY, CC.PRETERM_LABOR),
        _e("water broke early", "Preterm premature rupture of membranes.", LAY, CC.PPROM),
        _e("waters broke early", "Preterm premature rupture of membranes.", LAY, CC.PPROM),
        _e("water broke before labor", "Premature rupture of membranes.", LAY, CC.PROM),
        _e("leaking amniotic fluid", "Possible rupture of membranes.", LAY, CC.PROM),
        _e("infection of the amniotic fluid", "Chorioamnionitis.", LAY, CC.CHORIOAMNIONITIS),
        _e("uterine infection during labor", "Chorioamnionitis.", LAY, CC.CHORIOAMNIONITIS),

        # ----- Placental -----
        _e("placenta was low", "Low-lying placenta or previa.", LAY, CC.PLACENTA_PREVIA),
        _e("placenta covering the cervix", "Placenta previa.", LAY, CC.PLACENTA_PREVIA),
        _e("placenta over the cervix", "Placenta previa.", LAY, CC.PLACENTA_PREVIA),
        _e("placenta separated", "Placental abruption.", LAY, CC.PLACENTAL_ABRUPTION),
        _e("placenta detached", "Placental abruption.", LAY, CC.PLACENTAL_ABRUPTION),
        _e("placenta pulled away", "Placental abruption.", LAY, CC.PLACENTAL_ABRUPTION),
        _e("placenta grew into the uterus", "Placenta accreta spectrum.", LAY, CC.PLACENTA_ACCRETA),
        _e("placenta attached too deeply", "Placenta accreta spectrum.", LAY, CC.PLACENTA_ACCRETA),
        _e("placenta did not come out", "Retained placenta.", LAY, CC.RETAINED_PLACENTA),
        _e("d&c after delivery", "Curettage for retained tissue.", LAY, CC.RETAINED_PLACENTA),
        _e("exposed fetal vessels", "Vasa previa.", PREGNANCY, CC.VASA_PREVIA),

        # ----- Growth and fluid -----
        _e("baby was small", "Fetal growth restriction.", LAY, CC.IUGR),
        _e("baby measured small", "Fetal growth restriction.", LAY, CC.IUGR),
        _e("small baby", "Fetal growth restriction.", LAY, CC.IUGR),
        _e("poor fetal growth", "Fetal growth restriction.", PREGNANCY, CC.IUGR),
        _e("placental insufficiency", "Reduced placental function causing growth restriction.", PREGNANCY, CC.IUGR),
        _e("big baby", "Fetal macrosomia.", LAY, CC.MACROSOMIA),
        _e("baby was big", "Fetal macrosomia.", LAY, CC.MACROSOMIA),
        _e("baby over 9 pounds", "Fetal macrosomia.", LAY, CC.MACROSOMIA),
        _e("too much amniotic fluid", "Polyhydramnios.", LAY, CC.AMNIOTIC_FLUID_DISORDER),
        _e("not enough amniotic fluid", "Oligohydramnios.", LAY, CC.AMNIOTIC_FLUID_DISORDER),
        _e("low fluid", "Oligohydramnios.", LAY, CC.AMNIOTIC_FLUID_DISORDER),

        # ----- Hyperemesis / GI -----
        _e("severe morning sickness", "Hyperemesis gravidarum.", LAY, CC.HYPEREMESIS),
        _e("extreme morning sickness", "Hyperemesis gravidarum.", LAY, CC.HYPEREMESIS),
        _e("constant vomiting in pregnancy", "Hyperemesis gravidarum.", LAY, CC.HYPEREMESIS),
        _e("iv fluids for vomiting", "Hyperemesis requiring hydration.", LAY, CC.HYPEREMESIS),
        _e("picc line for nutrition", "Hyperemesis requiring parenteral nutrition.", LAY, CC.HYPEREMESIS),
        _e("stomach paralysis", "Gastroparesis.", LAY, CC.GASTROPARESIS),
        _e("slow stomach emptying", "Gastroparesis.", LAY, CC.GASTROPARESIS),
        _e("gallbladder attack", "Biliary colic from gallstones.", LAY, CC.GALLSTONES),
        _e("gallbladder surgery", "Cholecystectomy.", LAY, CC.GALLSTONES),
        _e("stomach ulcers", "Peptic ulcer disease.", LAY, CC.GASTRITIS),
        _e("itchy liver condition", "Intrahepatic cholestasis of pregnancy.", LAY, CC.CHOLESTASIS),
        _e("itching in pregnancy", "Possible cholestasis of pregnancy.", LAY, CC.CHOLESTASIS),
        _e("itchy palms and feet", "Typical symptom of cholestasis of pregnancy.", LAY, CC.CHOLESTASIS),
        _e("elevated bile acids", "Laboratory finding of cholestasis of pregnancy.", PREGNANCY, CC.CHOLESTASIS),

        # ----- Hemorrhage / delivery events -----
        _e("bled a lot after delivery", "Postpartum hemorrhage.", LAY, CC.POSTPARTUM_HEMORRHAGE),
        _e("heavy bleeding after birth", "Postpartum hemorrhage.", LAY, CC.POSTPARTUM_HEMORRHAGE),
        _e("heavy bleeding after delivery", "Postpartum hemorrhage.", LAY, CC.POSTPARTUM_HEMORRHAGE),
        _e("lost a lot of blood", "Postpartum hemorrhage.", LAY, CC.POSTPARTUM_HEMORRHAGE),
        _e("needed a blood transfusion", "Hemorrhage requiring transfusion.", LAY, CC.POSTPARTUM_HEMORRHAGE),
        _e("uterus did not contract", "Uterine atony.", LAY, CC.POSTPARTUM_HEMORRHAGE),
        _e("bakri balloon", "Intrauterine tamponade for hemorrhage.", PREGNANCY, CC.POSTPARTUM_HEMORRHAGE),
        _e("b-lynch suture", "Compression suture for uterine atony.", PREGNANCY, CC.POSTPARTUM_HEMORRHAGE),
        _e("uterus tore", "Uterine rupture.", LAY, CC.UTERINE_RUPTURE),
        _e("scar opened", "Uterine scar dehiscence.", LAY, CC.UTERINE_RUPTURE),
        _e("baby got stuck", "Shoulder dystocia.", LAY, CC.SHOULDER_DYSTOCIA),
        _e("bad tear", "Severe perineal laceration.", LAY, CC.SEVERE_PERINEAL_LACERATION),
        _e("infection after delivery", "Postpartum infection.", LAY, CC.POSTPARTUM_INFECTION),
        _e("infection after c-section", "Post-cesarean wound infection.", LAY, CC.POSTPARTUM_INFECTION),
        _e("heart weakened after pregnancy", "Peripartum cardiomyopathy.", LAY, CC.PERIPARTUM_CARDIOMYOPATHY),

        # ----- Cervix and losses -----
        _e("weak cervix", "Cervical insufficiency.", LAY, CC.CERVICAL_INSUFFICIENCY),
        _e("stitch in the cervix", "Cervical cerclage.", LAY, CC.CERVICAL_INSUFFICIENCY),
        _e("cervical stitch", "Cervical cerclage.", LAY, CC.CERVICAL_INSUFFICIENCY),
        _e("progesterone shots for short cervix", "Preterm birth prevention for a short cervix.", LAY, CC.CERVICAL_INSUFFICIENCY),
        _e("baby died before birth", "Stillbirth.", LAY, CC.STILLBIRTH),
        _e("lost the baby at", "Possible stillbirth or late loss.", LAY, CC.STILLBIRTH),
        _e("several miscarriages", "Recurrent pregnancy loss.", LAY, CC.RECURRENT_MISCARRIAGE),
        _e("three miscarriages", "Recurrent pregnancy loss.", LAY, CC.RECURRENT_MISCARRIAGE),
        _e("repeated miscarriages", "Recurrent pregnancy loss.", LAY, CC.RECURRENT_MISCARRIAGE),
        _e("pregnancy in the tube", "Ectopic pregnancy.", LAY, CC.ECTOPIC_PREGNANCY),
        _e("tubal rupture", "Ruptured ectopic pregnancy.", PREGNANCY, CC.ECTOPIC_PREGNANCY),
        _e("carried twins", "Prior multiple gestation.", LAY, CC.MULTIPLE_GESTATION),

        # ----- Chronic conditions -----
        _e("heart condition", "Cardiac disease.", LAY, CC.CARDIAC_DISEASE),
        _e("heart problems", "Cardiac disease.", LAY, CC.CARDIAC_DISEASE),
        _e("heart murmur requiring follow up", "Possible structural heart disease.", CHRONIC, CC.CARDIAC_DISEASE),
        _e("high pressure in the lungs", "Pulmonary hypertension.", LAY, CC.PULMONARY_HYPERTENSION),
        _e("high blood pressure before pregnancy", "Chronic hypertension.", LAY, CC.CHRONIC_HYPERTENSION),
        _e("takes blood pressure medication", "Treated chronic hypertension.", LAY, CC.CHRONIC_HYPERTENSION),
        _e("lisinopril", "ACE inhibitor for chronic hypertension.", CHRONIC, CC.CHRONIC_HYPERTENSION),
        _e("labetalol", "Antihypertensive used in and outside pregnancy.", CHRONIC, CC.CHRONIC_HYPERTENSION),
        _e("underactive thyroid", "Hypothyroidism.", LAY, CC.THYROID_DISORDER),
        _e("overactive thyroid", "Hyperthyroidism.", LAY, CC.THYROID_DISORDER),
        _e("thyroid medication", "Treated thyroid disorder.", LAY, CC.THYROID_DISORDER),
        _e("kidney problems", "Kidney disease.", LAY, CC.KIDNEY_DISEASE),
        _e("protein in urine", "Proteinuria, possible kidney disease.", LAY, CC.KIDNEY_DISEASE),
        _e("liver problems", "Liver disease.", LAY, CC.LIVER_DISEASE),
        _e("clotting disorder", "Thrombophilia.", LAY, CC.THROMBOPHILIA),
        _e("blood thinners", "Anticoagulation for thrombosis or thrombophilia.", LAY, CC.VENOUS_THROMBOEMBOLISM),
        _e("clot in the leg", "Deep vein thrombosis.", LAY, CC.VENOUS_THROMBOEMBOLISM),
        _e("clot in the lung", "Pulmonary embolism.", LAY, CC.VENOUS_THROMBOEMBOLISM),
        _e("bleeds easily", "Possible bleeding disorder.", LAY, CC.BLEEDING_DISORDER),
        _e("low blood count", "Anemia.", LAY, CC.ANEMIA),
        _e("iron infusions", "Treatment for iron deficiency anemia.", LAY, CC.ANEMIA),
        _e("weight loss surgery", "Bariatric surgery.", LAY, CC.BARIATRIC_SURGERY),
        _e("stomach stapling", "Bariatric surgery.", LAY, CC.BARIATRIC_SURGERY),
        _e("inhaler", "Rescue or controller medication for asthma.", LAY, CC.ASTHMA),
        _e("albuterol", "Bronchodilator for asthma.", CHRONIC, CC.ASTHMA),
        _e("hospitalized for asthma", "Severe asthma.", LAY, CC.SEVERE_ASTHMA),
        _e("joint disease on immunosuppressants", "Autoimmune arthritis.", LAY, CC.AUTOIMMUNE_DISEASE),
        _e("hydroxychloroquine", "Treatment for lupus and autoimmune disease.", CHRONIC, CC.AUTOIMMUNE_DISEASE),
        _e("plaquenil", "Hydroxychloroquine, used for lupus.", CHRONIC, CC.AUTOIMMUNE_DISEASE),
        _e("colitis", "Inflammatory bowel disease.", CHRONIC, CC.INFLAMMATORY_BOWEL_DISEASE),
        _e("convulsions", "Seizures.", LAY, CC.EPILEPSY),
        _e("bad headaches", "Migraine.", LAY, CC.MIGRAINE),
        _e("heart burn", "Gastroesophageal reflux.", LAY, CC.GERD),
        _e("womb removed", "Hysterectomy.", LAY, CC.ABSENCE_OF_UTERUS),
        _e("uterus removed", "Hysterectomy.", LAY, CC.ABSENCE_OF_UTERUS),
        _e("born without a uterus", "Mullerian agenesis.", LAY, CC.ABSENCE_OF_UTERUS),
        _e("heart shaped uterus", "Bicornuate uterus.", LAY, CC.UTERINE_ANOMALY),
        _e("scarring inside the uterus", "Asherman syndrome.", LAY, CC.ASHERMAN_SYNDROME),
        _e("growths in the uterus", "Uterine fibroids.", LAY, CC.UTERINE_FIBROIDS),
        _e("currently in treatment for cancer", "Active cancer.", LAY, CC.ACTIVE_CANCER),
        _e("tumor", "Neoplasm; confirm benign or malignant.", CHRONIC, CC.CANCER_HISTORY),
        _e("precancerous cervical cells", "Cervical dysplasia; review treatment history.", CHRONIC, CC.CANCER_HISTORY),
        _e("leep procedure", "Excision of cervical dysplasia.", CHRONIC, CC.CANCER_HISTORY),

        # ----- Reference terms (no condition) -----
        _e("gravida", "Number of times a woman has been pregnant.", OBSTETRIC),
        _e("para", "Number of pregnancies carried past 20 weeks.", OBSTETRIC),
        _e("gtpal", "Gravida, Term, Preterm, Abortions, Living children.", OBSTETRIC),
        _e("primigravida", "A woman pregnant for the first time.", OBSTETRIC),
        _e("multigravida", "A woman who has been pregnant more than once.", OBSTETRIC),
        _e("grand multipara", "A woman who has delivered five or more times.", OBSTETRIC),
        _e("nulliparous", "Never having delivered a pregnancy past 20 weeks.", OBSTETRIC),
        _e("term pregnancy", "Delivery between 37 and 42 weeks of gestation.", OBSTETRIC),
        _e("svd", "Spontaneous vaginal delivery.", OBSTETRIC),
        _e("vbac", "Vaginal birth after cesarean.", OBSTETRIC),
        _e("tolac", "Trial of labor after cesarean.", OBSTETRIC),
        _e("lscs", "Lower segment cesarean section.", OBSTETRIC),
        _e("epidural", "Regional anesthesia for labor.", OBSTETRIC),
        _e("induction of labor", "Medically starting labor.", OBSTETRIC),
        _e("apgar score", "Newborn assessment at 1 and 5 minutes.", OBSTETRIC),
        _e("mfm", "Maternal-fetal medicine specialist.", OBSTETRIC),
        _e("asrm", "American Society for Reproductive Medicine.", SCREENING),
        _e("bmi", "Body mass index, weight in kg divided by height in meters squared.", SCREENING),
        _e("fda donor screening", "Required infectious disease testing for gestational carriers.", SCREENING),
        _e("psychological evaluation", "Mental health assessment required before matching.", SCREENING),
        _e("mmpi", "Minnesota Multiphasic Personality Inventory, used in carrier screening.", SCREENING),
        _e("pai", "Personality Assessment Inventory, used in carrier screening.", SCREENING),
        _e("gestational carrier", "A woman who carries a pregnancy for intended parents.", SCREENING),
        _e("intended parents", "The people who will parent the child born via surrogacy.", SCREENING),
        _e("embryo transfer", "Placement of an embryo into the uterus.", SCREENING),
        _e("saline sonogram", "Uterine cavity evaluation before transfer.", SCREENING),
        _e("hysteroscopy", "Direct visualization of the uterine cavity.", SCREENING),
    ])

    def coded_entries(self) -> List[GlossaryEntry]:
        return [entry for entry in self.entries if entry.code is not None]

    def by_category(self) -> Dict[str, List[GlossaryEntry]]:
        grouped: Dict[str, List[GlossaryEntry]] = {}
        for entry in self.entries:
            grouped.setdefault(entry.category, []).append(entry)
        return grouped


# Global instance
MEDICAL_GLOSSARY = MedicalGlossary()
