"""
Tests for the career prompt templates.

Run tests with: pytest backend/tests/test_career_prompts.py -v
"""

import pytest

from prompts.career_prompts import CareerPrompts, MAX_RESUME_CHARS
from services.ai_gateway import Action, AICareerGateway, PROMPT_BUILDERS


class TestTemplateSelection:

    def test_every_action_has_exactly_one_template(self):
        assert set(PROMPT_BUILDERS) == set(Action)

    @pytest.mark.parametrize("action", list(Action))
    def test_template_is_never_empty(self, action):
        prompt = AICareerGateway.build_prompt(action, {})
        assert prompt.strip()
        assert "Return ONLY one valid JSON object" in prompt

    def test_templates_are_distinct(self):
        prompts = {AICareerGateway.build_prompt(action, {}) for action in Action}
        assert len(prompts) == len(Action)


class TestParseResumePrompt:

    def test_contains_resume_text(self):
        prompt = CareerPrompts.parse_resume({"resumeText": "Jane Doe, Python developer"})
        assert "Jane Doe, Python developer" in prompt
        assert '"skills"' in prompt

    def test_truncates_long_resume(self):
        resume = "a" * MAX_RESUME_CHARS + "TAIL-MARKER"
        prompt = CareerPrompts.parse_resume({"resumeText": resume})
        assert "a" * MAX_RESUME_CHARS in prompt
        assert "TAIL-MARKER" not in prompt


class TestDefaults:

    def test_mock_interview_defaults(self):
        prompt = CareerPrompts.mock_interview({"jobRole": "Data Analyst"})
        assert "Job Role: Data Analyst" in prompt
        assert "Experience Level: Mid-level" in prompt
        assert "Number of Questions: 5" in prompt

    def test_skill_assessment_defaults(self):
        prompt = CareerPrompts.skill_assessment({"skillCategory": "SQL"})
        assert "Difficulty Level: Mixed" in prompt
        assert "Number of Questions: 10" in prompt

    def test_match_jobs_defaults_to_india(self):
        prompt = CareerPrompts.match_jobs({"skills": ["Python"], "experience": "2-4 years"})
        assert "Location Preference: India" in prompt
        assert '["Python"]' in prompt
        assert "Experience: 2-4 years" in prompt

    def test_analyze_skills_serializes_skill_list(self):
        prompt = CareerPrompts.analyze_skills({"currentSkills": ["Python", "SQL"], "targetRole": "Data Engineer"})
        assert '["Python", "SQL"]' in prompt
        assert "Target Role: Data Engineer" in prompt

    def test_evaluate_answer_includes_question_and_answer(self):
        prompt = CareerPrompts.evaluate_answer({
            "question": "What is a join?",
            "expectedPoints": ["inner", "outer"],
            "answer": "Combines rows",
        })
        assert "Question: What is a join?" in prompt
        assert "Candidate's Answer: Combines rows" in prompt
