"""Prompt templates for multiple-choice test generation."""

QUESTION_TYPES = (
    "definition of concepts",
    "practical application",
    "situation analysis",
    "comparison of concepts",
    "problem solving",
    "logical reasoning",
)

TEST_GENERATION_PROMPT = """INSTRUCTION: You are an expert author of high-quality multiple-choice test items for school exam preparation.

TOPIC: {topic_name}{description_block}{material_block}

TEST REQUIREMENTS:
- Difficulty level: {tier} ({complexity})
- Number of questions: {num_questions}
- Focus on: {keywords}

QUALITY CRITERIA:
1. Every question checks one specific piece of knowledge or skill
2. Wrong options must be plausible distractors, never obviously wrong
3. Use different question types: {question_types}
4. Wording must be clear and unambiguous
5. Never ask two things in one question (no double-barreled questions)

QUESTION TYPE DISTRIBUTION:
- {recall_count} questions on facts and definitions (recall)
- {application_count} questions on understanding and application
- {analysis_count} questions on analysis and synthesis

REQUIRED ANSWER FORMAT:
Question 1. [Clear and specific question text]
A) [Plausible option]
B) [Plausible option]
C) [Plausible option]
D) [Plausible option]
Answer: [A/B/C/D]
Explanation: [Why the correct option is right and the others are not]
Type: [question type from the list above]

IMPORTANT:
- Do not use phrases like "Which of the options" or "Choose the correct one" - ask directly
- Never use "all of the above" or "none of the above" as an option
- The explanation must be 2-3 sentences long
- Generate exactly {num_questions} questions"""

QUALITY_RETRY_NOTICE = (
    "ATTENTION: The previous attempt produced too few good questions. "
    "Improve the wording of the questions and the answer options."
)

ADVICE_PROMPT = """Analyse the learner's results to give them thorough, useful advice.

{history_block}
{detail_block}

Based on this information (both the overall trend and the specific mistakes in the latest test), write detailed advice. Pay attention to trends in the results and to concrete knowledge gaps revealed by the latest test.

The answer must contain these sections:

1. Overall assessment of progress and the trend of results.
2. A breakdown of the mistakes in the latest test and the weak topics they reveal.
3. Concrete study recommendations that close those gaps.
4. A strategy for preparing for the next tests.
5. Motivation and support grounded in the learner's progress.

Style: friendly, supportive but professional. No emoji, markdown or images."""
