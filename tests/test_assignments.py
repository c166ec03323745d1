import gc
import random
import threading
import unittest

from daymark import assignments
from daymark.assignments import DISPLAY_COUNT, DailyAssignmentEngine, day_lock
from daymark.models import Job, JobState, UserProfile, UserSkills, today_iso

DAY = "2026-10-19"
NEXT_DAY = "2026-10-20"


def make_jobs(n=10, python_at=()):
    jobs = []
    for i in range(n):
        role = "Python Developer" if i in python_at else "Operations Associate"
        jobs.append(Job(
            id=f"j{i}", company=f"Company {i}", role=role, location="Remote",
            application_url=f"https://x.example/{i}", date_posted="2026-10-01",
        ))
    return jobs


def ids(*nums):
    return [f"j{n}" for n in nums]


class EngineTestCase(unittest.TestCase):
    def make_engine(self, jobs=None, profile=None, jobs_per_day=5):
        state = JobState()
        state.set_all_jobs(jobs if jobs is not None else make_jobs())
        return DailyAssignmentEngine(state, profile or UserProfile(), jobs_per_day=jobs_per_day,
                                     user_id=self.id())

    def assert_invariants(self, assignment):
        completed, skipped = set(assignment.completed_job_ids), set(assignment.skipped_job_ids)
        self.assertFalse(completed & skipped)
        self.assertLessEqual(completed, set(assignment.job_ids))
        self.assertLessEqual(skipped, set(assignment.job_ids))
        self.assertEqual(len(assignment.job_ids), len(set(assignment.job_ids)))


class AssignTests(EngineTestCase):
    def test_assigns_top_jobs_and_excludes_other_days(self):
        engine = self.make_engine()
        self.assertEqual(engine.assign_for_day(DAY).job_ids, ids(0, 1, 2, 3, 4))
        self.assertEqual(engine.assign_for_day(NEXT_DAY).job_ids, ids(5, 6, 7, 8, 9))

    def test_existing_slate_is_returned_untouched(self):
        engine = self.make_engine()
        first = engine.assign_for_day(DAY)
        again = engine.assign_for_day(DAY, count=2)
        self.assertIs(first, again)
        self.assertEqual(len(again.job_ids), 5)

    def test_history_is_excluded(self):
        engine = self.make_engine()
        engine.mark_applied("j0", "2026-10-01")
        engine.clear_day("2026-10-01")
        self.assertNotIn("j0", engine.assign_for_day(DAY).job_ids)

    def test_pool_smaller_than_target(self):
        engine = self.make_engine(make_jobs(3))
        self.assertEqual(engine.assign_for_day(DAY).job_ids, ids(0, 1, 2))
        self.assertEqual(engine.assign_for_day(NEXT_DAY).job_ids, [])


class ApplySkipTests(EngineTestCase):
    def setUp(self):
        self.engine = self.make_engine()
        self.engine.assign_for_day(DAY)

    def test_apply_marks_completed_without_refill(self):
        self.assertTrue(self.engine.mark_applied("j0", DAY))
        assignment = self.engine.state.daily_assignments[DAY]
        self.assertEqual(assignment.completed_job_ids, ["j0"])
        self.assertEqual(assignment.job_ids, ids(0, 1, 2, 3, 4))
        self.assertTrue(self.engine.is_job_completed("j0", DAY))
        self.assertEqual([a.status for a in self.engine.state.applications], ["applied"])

    def test_apply_is_idempotent(self):
        self.engine.mark_applied("j0", DAY)
        self.assertFalse(self.engine.mark_applied("j0", DAY))
        self.assertEqual(len(self.engine.state.applications), 1)
        self.assertEqual(self.engine.state.daily_assignments[DAY].completed_job_ids, ["j0"])

    def test_unknown_job_is_a_no_op(self):
        self.assertFalse(self.engine.mark_applied("nope", DAY))
        self.assertFalse(self.engine.mark_skipped("nope", "2026-12-01"))
        self.assertEqual(self.engine.state.applications, [])
        self.assertNotIn("2026-12-01", self.engine.state.daily_assignments)

    def test_skip_triggers_refill_of_exactly_one(self):
        self.assertTrue(self.engine.mark_skipped("j2", DAY, reason="not a fit"))
        assignment = self.engine.state.daily_assignments[DAY]
        self.assertEqual(assignment.job_ids, ids(0, 1, 2, 3, 4, 5))
        self.assertEqual(assignment.skipped_job_ids, ["j2"])
        self.assertEqual(len(assignment.active_job_ids()), 5)
        self.assertEqual(self.engine.state.applications[0].skip_reason, "not a fit")

    def test_skip_twice_does_not_refill_twice(self):
        self.engine.mark_skipped("j2", DAY)
        self.assertFalse(self.engine.mark_skipped("j2", DAY))
        self.assertEqual(len(self.engine.state.daily_assignments[DAY].job_ids), 6)

    def test_skipping_completed_job_is_ignored(self):
        self.engine.mark_applied("j1", DAY)
        self.assertFalse(self.engine.mark_skipped("j1", DAY))
        assignment = self.engine.state.daily_assignments[DAY]
        self.assertEqual(assignment.skipped_job_ids, [])
        self.assert_invariants(assignment)

    def test_applying_skipped_job_moves_it_to_completed(self):
        self.engine.mark_skipped("j1", DAY)
        self.engine.mark_applied("j1", DAY)
        assignment = self.engine.state.daily_assignments[DAY]
        self.assertEqual(assignment.completed_job_ids, ["j1"])
        self.assertEqual(assignment.skipped_job_ids, [])
        self.assertFalse(self.engine.is_job_skipped("j1", DAY))
        self.assert_invariants(assignment)

    def test_apply_on_day_without_slate_creates_it(self):
        self.engine.mark_applied("j9", NEXT_DAY)
        assignment = self.engine.state.daily_assignments[NEXT_DAY]
        self.assertEqual(assignment.job_ids, ["j9"])
        self.assertEqual(assignment.completed_job_ids, ["j9"])

    def test_refill_when_already_full_adds_nothing(self):
        self.assertEqual(self.engine.refill(DAY), [])
        self.assertEqual(self.engine.refill("2030-01-01"), [])

    def test_refill_stops_when_pool_runs_out(self):
        engine = self.make_engine(make_jobs(6))
        engine.assign_for_day(DAY)
        engine.mark_skipped("j0", DAY)
        engine.mark_skipped("j1", DAY)
        assignment = engine.state.daily_assignments[DAY]
        self.assertEqual(assignment.job_ids, ids(0, 1, 2, 3, 4, 5))
        self.assertEqual(len(assignment.active_job_ids()), 4)


class MonotonicityTests(EngineTestCase):
    def test_random_sequences_never_shrink_slate(self):
        for seed in range(20):
            rng = random.Random(seed)
            engine = self.make_engine(make_jobs(30))
            engine.assign_for_day(DAY)
            previous = list(engine.state.daily_assignments[DAY].job_ids)
            for _ in range(25):
                job_id = f"j{rng.randrange(30)}"
                op = rng.choice(["apply", "skip", "refill"])
                if op == "apply":
                    engine.mark_applied(job_id, DAY)
                elif op == "skip":
                    engine.mark_skipped(job_id, DAY)
                else:
                    engine.refill(DAY)
                current = engine.state.daily_assignments[DAY].job_ids
                self.assertEqual(current[:len(previous)], previous)
                self.assert_invariants(engine.state.daily_assignments[DAY])
                previous = list(current)


class RefreshReassignTests(EngineTestCase):
    def test_refresh_retires_active_jobs_as_seen(self):
        engine = self.make_engine()
        engine.assign_for_day(DAY)
        engine.mark_applied("j0", DAY)

        added = engine.refresh_for_day(DAY)
        assignment = engine.state.daily_assignments[DAY]
        self.assertEqual(added, ids(5, 6, 7, 8))
        self.assertEqual(engine.state.seen_job_ids, ids(1, 2, 3, 4))
        self.assertEqual(assignment.completed_job_ids, ["j0"])
        self.assertEqual(assignment.job_ids, ids(0, 1, 2, 3, 4, 5, 6, 7, 8))
        self.assertEqual([j.id for j in engine.get_daily_jobs(DAY)], ids(5, 6, 7, 8))
        self.assert_invariants(assignment)

    def test_seen_jobs_never_come_back(self):
        engine = self.make_engine()
        engine.assign_for_day(DAY)
        engine.refresh_for_day(DAY)
        self.assertEqual(engine.assign_for_day(NEXT_DAY).job_ids, [])

    def test_reassign_for_resume_keeps_completed_and_reranks(self):
        profile = UserProfile()
        engine = self.make_engine(make_jobs(10, python_at=(7, 8)), profile)
        engine.assign_for_day(DAY)
        engine.mark_applied("j0", DAY)
        engine.mark_skipped("j1", DAY)

        profile.skills = UserSkills(languages=["Python"])
        profile.resume_file_name = "resume.pdf"
        assignment = engine.reassign_for_resume(DAY)

        self.assertEqual(assignment.job_ids, ids(0, 7, 8, 2, 3))
        self.assertEqual(assignment.completed_job_ids, ["j0"])
        self.assertEqual(assignment.skipped_job_ids, [])

    def test_clear_day(self):
        engine = self.make_engine()
        engine.assign_for_day(DAY)
        self.assertTrue(engine.clear_day(DAY))
        self.assertFalse(engine.clear_day(DAY))


class DailyJobsTests(EngineTestCase):
    def test_lazy_assignment_and_resume_ordering(self):
        profile = UserProfile(skills=UserSkills(languages=["Python"]), resume_file_name="cv.pdf")
        engine = self.make_engine(make_jobs(10, python_at=(3, 9)), profile)

        jobs = engine.get_daily_jobs(DAY)
        self.assertIn(DAY, engine.state.daily_assignments)
        self.assertEqual([j.id for j in jobs][:2], ids(3, 9))
        self.assertEqual([j.match_score for j in jobs], [100, 100, 60, 60, 60])

    def test_no_resume_keeps_slate_order_without_scores(self):
        engine = self.make_engine()
        jobs = engine.get_daily_jobs(DAY)
        self.assertEqual([j.id for j in jobs], ids(0, 1, 2, 3, 4))
        self.assertTrue(all(j.match_score is None for j in jobs))

    def test_display_is_capped(self):
        engine = self.make_engine(jobs_per_day=8)
        self.assertEqual(len(engine.get_daily_jobs(DAY)), DISPLAY_COUNT)

    def test_scores_follow_current_skills(self):
        profile = UserProfile(resume_file_name="cv.pdf")
        engine = self.make_engine(make_jobs(5, python_at=(4,)), profile)
        before = engine.get_daily_jobs(DAY)
        self.assertIs(engine.get_daily_jobs(DAY), before)

        profile.skills.languages.append("Python")
        after = engine.get_daily_jobs(DAY)
        self.assertEqual(after[0].id, "j4")
        self.assertEqual(after[0].match_score, 100)

    def test_no_jobs_no_slate(self):
        engine = self.make_engine([])
        self.assertEqual(engine.get_daily_jobs(DAY), [])
        self.assertEqual(engine.state.daily_assignments, {})

    def test_completed_and_skipped_hidden(self):
        engine = self.make_engine()
        engine.assign_for_day(DAY)
        engine.mark_applied("j0", DAY)
        engine.mark_skipped("j1", DAY)
        self.assertEqual([j.id for j in engine.get_daily_jobs(DAY)], ids(2, 3, 4, 5, 6))


class StatsTests(EngineTestCase):
    def test_application_stats(self):
        today = today_iso()
        engine = self.make_engine()
        engine.assign_for_day(today)
        engine.mark_applied("j0", today)
        engine.mark_applied("j1", today)
        engine.mark_skipped("j2", today)

        stats = engine.application_stats(today)
        self.assertEqual(stats, {"total_applied": 2, "this_week": 2, "today_completed": 2, "today_total": 5})

    def test_stats_for_empty_day(self):
        engine = self.make_engine()
        self.assertEqual(engine.application_stats(DAY)["today_completed"], 0)


class ConcurrencyTests(EngineTestCase):
    def test_concurrent_skips_do_not_over_refill(self):
        engine = self.make_engine(make_jobs(20))
        engine.assign_for_day(DAY)
        barrier = threading.Barrier(4)

        def skip(job_id):
            barrier.wait()
            engine.mark_skipped(job_id, DAY)

        threads = [threading.Thread(target=skip, args=(f"j{i}",)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assignment = engine.state.daily_assignments[DAY]
        self.assertEqual(len(assignment.active_job_ids()), 5)
        self.assertEqual(len(assignment.job_ids), 9)
        self.assert_invariants(assignment)

    def test_concurrent_days_never_share_jobs(self):
        engine = self.make_engine(make_jobs(10))
        days = [f"2026-11-0{d}" for d in range(1, 5)]
        threads = [threading.Thread(target=engine.assign_for_day, args=(d,)) for d in days]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assigned = [jid for d in days for jid in engine.state.daily_assignments[d].job_ids]
        self.assertEqual(len(assigned), len(set(assigned)))
        self.assertEqual(len(assigned), 10)

    def test_day_lock_is_shared_per_user_and_date(self):
        self.assertIs(day_lock("u", DAY), day_lock("u", DAY))
        self.assertIsNot(day_lock("u", DAY), day_lock("u", NEXT_DAY))

    def test_unused_day_locks_are_released(self):
        lock = day_lock("transient", DAY)
        self.assertIn(("day", "transient", DAY), assignments._LOCKS)
        del lock
        gc.collect()
        self.assertNotIn(("day", "transient", DAY), assignments._LOCKS)


if __name__ == "__main__":
    unittest.main()
