from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel
from typing import Annotated, List, Optional
from datetime import datetime
from schemas.user import UserOut

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class CategoryMap(BaseModel):
    """Closed set of boolean flags; unknown keys are dropped, missing ones are False."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class FamilyHistory(CategoryMap):
    diabetes: bool = False
    hypertension: bool = False
    heart_disease: bool = False
    cancer: bool = False
    asthma: bool = False
    epilepsy: bool = False
    other: bool = False


class CurrentlyExperiencing(CategoryMap):
    chest_pain: bool = False
    shortness_of_breath: bool = False
    dizziness: bool = False
    severe_headache: bool = False
    sudden_weakness: bool = False
    vision_problems: bool = False
    difficulty_speaking: bool = False
    numbness: bool = False
    weight_loss: bool = False
    weight_gain: bool = False
    night_sweats: bool = False
    unexplained_fever: bool = False
    persistent_cough: bool = False
    coughing_blood: bool = False
    frequent_urination: bool = False
    excessive_thirst: bool = False
    hunger: bool = False
    abdominal_pain: bool = False
    nausea_vomiting: bool = False
    diarrhea: bool = False
    joint_pain: bool = False
    skin_rash: bool = False
    swelling: bool = False
    fatigue: bool = False
    anxiety: bool = False
    depression: bool = False
    sleep_problems: bool = False
    memory_issues: bool = False
    concentration_issues: bool = False
    mood_swings: bool = False
    gastrointestinal_issues: bool = False
    urinary_issues: bool = False
    menstrual_issues: bool = False
    other: bool = False


class Immunizations(CategoryMap):
    tetanus: bool = False
    influenza: bool = False
    covid19: bool = False
    hepatitis_b: bool = False
    mmr: bool = False
    varicella: bool = False
    pneumococcal: bool = False
    meningococcal: bool = False
    hpv: bool = False


class Lifestyle(CategoryMap):
    smoking: bool = False
    alcohol: bool = False
    exercise: bool = False
    diet: bool = False


CATEGORY_FIELDS = {
    "familyHistory": FamilyHistory,
    "currentlyExperiencing": CurrentlyExperiencing,
    "immunizations": Immunizations,
    "lifestyle": Lifestyle,
}


class MedicalRecordIn(BaseModel):
    """Intake form as submitted. Owner and attachments are set by the server."""

    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=to_camel),
        extra="ignore",
    )

    age: int = Field(ge=0)
    height: float = Field(gt=0)
    weight: float = Field(gt=0)
    gender: RequiredText
    blood_group: RequiredText
    emergency_contact: RequiredText

    allergies: Optional[str] = None
    medication: Optional[str] = None
    medication_list: Optional[str] = Field(None, validation_alias="medicationlist")
    surgeries: Optional[str] = None

    family_history: FamilyHistory = Field(default_factory=FamilyHistory)
    currently_experiencing: CurrentlyExperiencing = Field(default_factory=CurrentlyExperiencing)
    immunizations: Immunizations = Field(default_factory=Immunizations)
    lifestyle: Lifestyle = Field(default_factory=Lifestyle)


class MedicalRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    user: Optional[UserOut] = None

    age: int
    height: float
    weight: float
    gender: str
    blood_group: str
    emergency_contact: str

    allergies: Optional[str] = None
    medication: Optional[str] = None
    medication_list: Optional[str] = Field(None, alias="medicationlist")
    surgeries: Optional[str] = None
    prescriptions: List[str] = Field(default_factory=list)

    family_history: FamilyHistory
    currently_experiencing: CurrentlyExperiencing
    immunizations: Immunizations
    lifestyle: Lifestyle

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MedRecordResponse(BaseModel):
    message: Optional[str] = None
    medRecord: MedicalRecordOut


class UploadResponse(BaseModel):
    urls: List[str]
