"""
Eligibility & Recommendation Engine

Pure read-time computation of whether a student may apply to an internship
and how well the posting fits them.

ELIGIBILITY GATE (all required):
- student's department is one of the internship's eligible departments
- student's CGPA >= minimum CGPA
- student's semester >= minimum semester

RECOMMENDATION SCORE (0-100):
    skill share of required skills  x 40
  + department match                  30
  + CGPA requirement met              20
  + semester requirement met          10
"""

import math
from typing import List

from app.models.entities import Internship, MatchEvaluation, Student

SKILL_WEIGHT = 40
DEPARTMENT_WEIGHT = 30
CGPA_WEIGHT = 20
SEMESTER_WEIGHT = 10


def department_matches(student: Student, internship: Internship) -> bool:
    return student.department in internship.eligible_departments


def cgpa_eligible(student: Student, internship: Internship) -> bool:
    return student.cgpa >= internship.minimum_cgpa


def semester_eligible(student: Student, internship: Internship) -> bool:
    return student.semester >= internship.minimum_semester


def check_eligibility(student: Student, internship: Internship) -> bool:
    """The three-part department/CGPA/semester gate."""
    return (
        department_matches(student, internship)
        and cgpa_eligible(student, internship)
        and semester_eligible(student, internship)
    )


def compute_skill_match_fraction(student_skills: List[str], required_skills: List[str]) -> float:
    """
    Fraction of required skills the student lists (exact names).

    Returns 0.0 when the internship lists no required skills.
    """
    if not required_skills:
        return 0.0
    owned = set(student_skills)
    matches = sum(1 for skill in required_skills if skill in owned)
    return matches / len(required_skills)


def compute_recommendation_score(student: Student, internship: Internship) -> int:
    score = (
        compute_skill_match_fraction(student.skills, internship.required_skills) * SKILL_WEIGHT
        + (DEPARTMENT_WEIGHT if department_matches(student, internship) else 0)
        + (CGPA_WEIGHT if cgpa_eligible(student, internship) else 0)
        + (SEMESTER_WEIGHT if semester_eligible(student, internship) else 0)
    )
    # Half-up rounding, not banker's rounding
    return int(math.floor(score + 0.5))


def evaluate(student: Student, internship: Internship, has_applied: bool = False) -> MatchEvaluation:
    """Eligibility, score and applied flag for one student/internship pair."""
    return MatchEvaluation(
        is_eligible=check_eligibility(student, internship),
        recommendation_score=compute_recommendation_score(student, internship),
        has_applied=has_applied
    )
