import unittest

from daymark.models import Job, UserSkills
from daymark.scorer import (
    GENERIC_JOB_SCORE,
    filter_and_rank,
    find_job_keywords,
    has_any_skills,
    score_job,
)


def make_job(job_id, role, company="Acme", location="Remote"):
    return Job(
        id=job_id,
        company=company,
        role=role,
        location=location,
        application_url=f"https://jobs.example.com/{job_id}",
        date_posted="2026-10-01",
    )


class ScoreJobTests(unittest.TestCase):
    def test_two_of_two_keywords_scores_100(self):
        job = make_job("1", "Backend Engineer (Python, Django)")
        skills = UserSkills(languages=["Python"], frameworks=["Django"])
        result = score_job(job, skills, has_resume=True)

        self.assertEqual(find_job_keywords("backend engineer (python, django) acme"), ["python", "django"])
        self.assertEqual(result.score, 100)
        self.assertEqual(result.job.match_score, 100)
        self.assertIn("python", result.matched_keywords)
        self.assertIn("django", result.matched_keywords)
        self.assertTrue(result.has_resume_match)

    def test_one_of_two_keywords_scores_75(self):
        job = make_job("1", "Backend Engineer (Python, Django)")
        result = score_job(job, UserSkills(languages=["Python"]), has_resume=True)
        self.assertEqual(result.score, 75)
        self.assertEqual(result.matched_keywords, ["python"])

    def test_java_does_not_match_javascript(self):
        job = make_job("1", "JavaScript Developer")
        result = score_job(job, UserSkills(languages=["Java"]), has_resume=True)
        self.assertEqual(result.score, 0)
        self.assertEqual(result.matched_keywords, [])

    def test_synonyms_match_canonical_keyword(self):
        job = make_job("1", "Platform Engineer, Kubernetes")
        result = score_job(job, UserSkills(tools=["k8s"]), has_resume=True)
        self.assertEqual(result.score, 100)

    def test_job_without_keywords_gets_generic_score(self):
        job = make_job("1", "Operations Associate")
        result = score_job(job, UserSkills(languages=["Python"]), has_resume=True)
        self.assertEqual(result.score, GENERIC_JOB_SCORE)

    def test_resume_terms_outside_vocabulary_add_capped_bonus(self):
        job = make_job("1", "Quant Trader")
        skills = UserSkills(other_keywords=["quant", "trader"])
        result = score_job(job, skills, has_resume=True)
        self.assertEqual(result.score, 70)

    def test_no_resume_leaves_score_unset(self):
        job = make_job("1", "Backend Engineer (Python, Django)")
        result = score_job(job, UserSkills(languages=["Python"]), has_resume=False)
        self.assertIsNone(result.job.match_score)
        self.assertEqual(result.score, 0)
        self.assertFalse(result.has_resume_match)

    def test_resume_without_tokens_leaves_score_unset(self):
        job = make_job("1", "Backend Engineer (Python)")
        result = score_job(job, UserSkills(role_types=["Backend"]), has_resume=True)
        self.assertIsNone(result.job.match_score)
        self.assertTrue(result.matches_role_filter)

    def test_role_filter_miss(self):
        job = make_job("1", "Frontend Engineer")
        result = score_job(job, UserSkills(languages=["Python"], role_types=["Backend"]), has_resume=True)
        self.assertFalse(result.matches_role_filter)
        self.assertIsNone(result.job.match_score)
        self.assertEqual(result.score, 0)

    def test_role_filter_hit_reports_role(self):
        job = make_job("1", "Backend Engineer")
        result = score_job(job, UserSkills(role_types=["Backend"]), has_resume=False)
        self.assertTrue(result.matches_role_filter)
        self.assertEqual(result.matched_keywords, ["Backend"])

    def test_input_job_not_mutated(self):
        job = make_job("1", "Backend Engineer (Python)")
        score_job(job, UserSkills(languages=["Python"]), has_resume=True)
        self.assertIsNone(job.match_score)

    def test_score_bounds(self):
        roles = [
            "Backend Engineer (Python, Django)", "JavaScript Developer", "C++ Systems Intern",
            ".NET Developer", "Data Scientist - pandas, numpy, scikit-learn", "Barista", "",
        ]
        skill_sets = [
            UserSkills(),
            UserSkills(languages=["Python", "C++"], frameworks=[".NET", "Pandas"]),
            UserSkills(other_keywords=["barista", "coffee", "latte", "espresso", "milk"]),
        ]
        for role in roles:
            for skills in skill_sets:
                for has_resume in (True, False):
                    result = score_job(make_job("x", role), skills, has_resume)
                    self.assertGreaterEqual(result.score, 0)
                    self.assertLessEqual(result.score, 100)

    def test_symbol_keywords_are_found(self):
        keywords = find_job_keywords("c++ and .net developer")
        self.assertIn("c++", keywords)
        self.assertIn(".net", keywords)
        self.assertNotIn("c", keywords)


class FilterAndRankTests(unittest.TestCase):
    def setUp(self):
        self.jobs = [
            make_job("a", "Operations Associate"),
            make_job("b", "Backend Engineer (Python, Django)"),
            make_job("c", "JavaScript Developer"),
            make_job("d", "Backend Engineer (Python, Go)"),
        ]

    def test_no_resume_keeps_input_order(self):
        ranked = filter_and_rank(self.jobs, UserSkills(languages=["Python"]), has_resume=False)
        self.assertEqual([j.id for j in ranked], ["a", "b", "c", "d"])
        self.assertTrue(all(j.match_score is None for j in ranked))

    def test_resume_sorts_by_score_descending(self):
        skills = UserSkills(languages=["Python"], frameworks=["Django"])
        ranked = filter_and_rank(self.jobs, skills, has_resume=True)
        self.assertEqual([j.id for j in ranked], ["b", "d", "a", "c"])
        self.assertEqual([j.match_score for j in ranked], [100, 75, 60, 0])

    def test_role_filter_excludes_non_matching_jobs(self):
        skills = UserSkills(role_types=["Backend"])
        ranked = filter_and_rank(self.jobs, skills, has_resume=False)
        self.assertEqual([j.id for j in ranked], ["b", "d"])

    def test_role_types_match_regardless_of_case_or_alias(self):
        jobs = [
            make_job("fs", "Full Stack Engineer"),
            make_job("api", "API Engineer"),
            make_job("ops", "Operations Associate"),
        ]
        skills = UserSkills(languages=["Python"], role_types=["backend", "fullstack"])
        ranked = filter_and_rank(jobs, skills, has_resume=True)
        self.assertEqual(sorted(j.id for j in ranked), ["api", "fs"])
        result = score_job(jobs[1], UserSkills(role_types=["BACKEND"]))
        self.assertEqual(result.matched_keywords, ["BACKEND"])

    def test_empty_inputs(self):
        self.assertEqual(filter_and_rank([], UserSkills(), has_resume=True), [])
        self.assertFalse(has_any_skills(UserSkills()))


if __name__ == "__main__":
    unittest.main()
