from inochi.models.muscle import Muscle
from inochi.models.equipment import Equipment
from inochi.models.skill import Skill, LevelEnum
from inochi.models.private_skill import PrivateSkill
from inochi.models.submission import UserSubmission, SubmissionTypeEnum, SubmissionStatusEnum

__all__ = [
    "Muscle", "Equipment",
    "Skill", "LevelEnum",
    "PrivateSkill",
    "UserSubmission", "SubmissionTypeEnum", "SubmissionStatusEnum",
]
