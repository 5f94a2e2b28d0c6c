import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from resume_ranker.schemas.resume import StructuredResume  # noqa: E402
from resume_ranker.services.scorer import overall_score, round_half_up, score_resume  # noqa: E402


def _resume(**sections) -> StructuredResume:
    return StructuredResume.model_validate(sections)


class ScorerTests(unittest.TestCase):
    def test_empty_resume_scores_zero_everywhere(self):
        scores = score_resume(StructuredResume())
        self.assertEqual(
            scores.model_dump(by_alias=True),
            {
                "overallScore": "0",
                "educationScore": "0",
                "experienceScore": "0",
                "skillsScore": "0",
                "activitiesScore": "0",
            },
        )

    def test_full_profile_scores(self):
        resume = _resume(
            education=[{"institution": "MIT", "degree": "BSc", "fieldOfStudy": "CS", "gpa": "3.9"}],
            experience=[
                {
                    "company": "Acme",
                    "position": "Engineer",
                    "description": "Built distributed payment systems at scale",
                    "durationMonths": 36,
                }
            ],
            skills=[
                {"skillName": "Python", "category": "technical", "proficiencyLevel": "expert"},
                {"skillName": "Docker", "category": "tool", "proficiencyLevel": "advanced"},
                {"skillName": "Communication", "category": "soft", "proficiencyLevel": "intermediate"},
            ],
            activities=[
                {"activityName": "Team lead", "activityType": "leadership"},
                {"activityName": "AWS SA", "activityType": "certification"},
                {"activityName": "Food bank", "activityType": "volunteer"},
            ],
        )
        scores = score_resume(resume)
        self.assertEqual(scores.education_score, "100")
        self.assertEqual(scores.experience_score, "90")
        self.assertEqual(scores.skills_score, "48")
        self.assertEqual(scores.activities_score, "45")
        self.assertEqual(scores.overall_score, "75")

    def test_education_bonuses_are_independent_of_degree(self):
        resume = _resume(education=[{"institution": "State U", "gpa": "3.2", "fieldOfStudy": "Biology"}])
        self.assertEqual(score_resume(resume).education_score, "80")

    def test_education_base_only(self):
        resume = _resume(education=[{"institution": "State U"}])
        self.assertEqual(score_resume(resume).education_score, "40")

    def test_partial_year_experience_is_rounded(self):
        resume = _resume(experience=[{"company": "Acme", "durationMonths": 7}])
        scores = score_resume(resume)
        self.assertEqual(scores.experience_score, "46")
        self.assertEqual(scores.overall_score, "16")

    def test_experience_missing_duration_counts_as_zero(self):
        resume = _resume(experience=[{"company": "Acme"}, {"company": "Globex", "durationMonths": 12}])
        self.assertEqual(score_resume(resume).experience_score, "50")

    def test_short_description_earns_no_bonus(self):
        resume = _resume(experience=[{"company": "Acme", "description": "Did stuff"}])
        self.assertEqual(score_resume(resume).experience_score, "40")

    def test_scores_are_capped_at_one_hundred(self):
        resume = _resume(
            experience=[{"company": "Acme", "durationMonths": 240, "description": "Led platform engineering for a decade"}],
            skills=[
                {"skillName": f"Skill {index}", "category": "framework", "proficiencyLevel": "expert"}
                for index in range(20)
            ],
            activities=[{"activityName": f"Award {index}", "activityType": "award"} for index in range(10)],
        )
        scores = score_resume(resume)
        self.assertEqual(scores.experience_score, "100")
        self.assertEqual(scores.skills_score, "100")
        self.assertEqual(scores.activities_score, "100")

    def test_skill_counts_overlap(self):
        resume = _resume(
            skills=[
                {"skillName": "Rust", "category": "language", "proficiencyLevel": "expert"},
                {"skillName": "Mentoring", "category": "soft", "proficiencyLevel": "advanced"},
                {"skillName": "Finance", "category": "domain", "proficiencyLevel": "beginner"},
            ]
        )
        # 30 + 5 (technical) + 2 (soft) + 3 * 2 (advanced)
        self.assertEqual(score_resume(resume).skills_score, "43")

    def test_unknown_enums_fall_back_before_scoring(self):
        resume = _resume(
            skills=[{"skillName": "Juggling", "category": "circus", "proficiencyLevel": "guru"}],
            activities=[{"activityName": "Something", "activityType": "unknown"}],
        )
        self.assertEqual(resume.skills[0].category, "other")
        self.assertEqual(resume.skills[0].proficiency_level, "intermediate")
        self.assertEqual(resume.activities[0].activity_type, "other")
        scores = score_resume(resume)
        self.assertEqual(scores.skills_score, "30")
        self.assertEqual(scores.activities_score, "20")

    def test_overall_rounds_half_up(self):
        resume = _resume(
            education=[{"institution": "State U"}],
            skills=[{"skillName": "Knitting", "category": "other", "proficiencyLevel": "beginner"}],
            activities=[{"activityName": "Club", "activityType": "other"}],
        )
        # 40 * 0.25 + 30 * 0.25 + 20 * 0.15 = 20.5
        self.assertEqual(score_resume(resume).overall_score, "21")

    def test_overall_matches_weighted_sub_scores(self):
        resume = _resume(
            education=[{"institution": "MIT", "degree": "MSc"}],
            experience=[{"company": "Acme", "durationMonths": 30, "description": "Owned the billing pipeline end to end"}],
            skills=[{"skillName": "Go", "category": "language", "proficiencyLevel": "advanced"}],
        )
        scores = score_resume(resume)
        numbers = scores.as_numbers()
        self.assertEqual(
            numbers["overall"],
            overall_score(numbers["education"], numbers["experience"], numbers["skills"], numbers["activities"]),
        )
        for key in ("education", "experience", "skills", "activities", "overall"):
            self.assertGreaterEqual(numbers[key], 0)
            self.assertLessEqual(numbers[key], 100)

    def test_scoring_is_idempotent(self):
        resume = _resume(
            education=[{"institution": "MIT", "degree": "BSc"}],
            skills=[{"skillName": "Python", "category": "technical", "proficiencyLevel": "expert"}],
        )
        self.assertEqual(score_resume(resume), score_resume(resume))

    def test_round_half_up(self):
        self.assertEqual(round_half_up(12.5), 13)
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.4999), 2)


if __name__ == "__main__":
    unittest.main()
