from jobhound.config import ScoringWeights
from jobhound.models import Profile, Skill
from jobhound.scorer import filter_and_rank, score


def test_reference_scenario(make_job, profile):
    job = make_job(is_remote=True, skills=["Selenium", "Cypress"],
                   title="QA Automation Engineer", job_type="contract")
    result = score(job, profile)
    assert result.score == 85
    assert result.matched_skills == ["Selenium"]
    assert result.missing_skills == ["Cypress"]
    assert len(result.reasons) == 5
    assert result.reasons[0].startswith("Freelance/contract")


def test_preferred_location_when_not_remote(make_job, profile):
    job = make_job(is_remote=False, location="venezuela", title="Data Analyst", skills=["Excel"])
    result = score(job, profile)
    # 15 location + 0 skills + 10 experience
    assert result.score == 25


def test_text_scan_when_no_listed_skills(make_job, profile):
    job = make_job(title="Automation Tester", description="Selenium with Python, selenium grid")
    result = score(job, profile)
    # remote 30 + two skills found 10 + role 20 + experience 10
    assert result.score == 70
    assert result.matched_skills == ["Selenium", "Python"]


def test_flat_bonus_when_nothing_found(make_job, profile):
    job = make_job(title="QA Engineer", description="Manual regression")
    result = score(job, profile)
    assert result.score == 80
    assert "skills not listed" in result.reasons[1]


def test_text_scan_is_capped(make_job):
    names = ["Selenium", "Cypress", "Playwright", "Jest", "Mocha", "Python", "Java", "SQL"]
    profile = Profile(skills=[Skill(n) for n in names], total_experience=0)
    job = make_job(is_remote=False, location="Berlin", title="Engineer", description=" ".join(names))
    assert score(job, profile).score == 30


def test_invalid_profile_scores_zero(make_job):
    result = score(make_job(), Profile(skills=None))
    assert (result.score, result.reasons, result.matched_skills) == (0, [], [])


def test_score_bounds_with_heavy_weights(make_job, profile):
    weights = ScoringWeights(remote=90, role_keyword=90)
    assert score(make_job(job_type="freelance"), profile, weights).score == 100
    negative = ScoringWeights(remote=-200)
    assert score(make_job(), profile, negative).score == 0


def test_half_up_rounding(make_job):
    profile = Profile(skills=[Skill("A")], total_experience=0)
    job = make_job(is_remote=False, location="Berlin", title="Engineer", skills=["A", "B", "C", "D", "E", "F", "G", "H"])
    # 36 / 8 = 4.5
    assert score(job, profile, ScoringWeights(skill_overlap=36)).score == 5


def test_adding_a_matching_skill_never_lowers_the_score(make_job):
    job = make_job(skills=["A", "B"], title="QA")
    before = score(job, Profile(skills=[Skill("A")], total_experience=3)).score
    after = score(job, Profile(skills=[Skill("A"), Skill("B")], total_experience=3)).score
    assert after >= before


def test_filter_and_rank(make_job, profile):
    strong = make_job(title="QA Automation Engineer", skills=["Selenium", "Python"])
    weak = make_job(title="Office Manager", skills=["Excel", "Word"])
    onsite = make_job(title="QA Engineer", is_remote=False, location="Venezuela")
    ranked = filter_and_rank([weak, onsite, strong], profile, min_score=50)
    assert [r.job for r in ranked] == [strong]
    everything = filter_and_rank([weak, onsite, strong], profile, min_score=0, remote_only=False)
    assert [r.score for r in everything] == sorted((r.score for r in everything), reverse=True)
    assert len(everything) == 3


def test_skill_list_with_non_skill_items_scores_zero(make_job):
    result = score(make_job(title="QA Engineer"), Profile(skills=["Selenium", None], total_experience=5))
    assert (result.score, result.reasons) == (0, [])


def test_experience_from_yaml_string(make_job):
    profile = Profile.from_dict({"skills": ["Selenium"], "total_experience": "5"})
    assert profile.total_experience == 5.0
    result = score(make_job(is_remote=False, location="Berlin", title="Engineer"), profile)
    assert result.reasons[-1].startswith("5 years of experience")


def test_non_numeric_experience_counts_as_none(make_job):
    profile = Profile(skills=[Skill("Selenium")], total_experience="lots")
    result = score(make_job(is_remote=False, location="Berlin", title="Engineer"), profile)
    # flat bonus for unlisted skills only
    assert result.score == 20
    assert not any("experience" in r for r in result.reasons)
    assert Profile.from_dict({"skills": [], "total_experience": "lots"}).total_experience == 0
