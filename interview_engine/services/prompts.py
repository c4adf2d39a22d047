"""
Interview Prompts and Canonical Texts.

Prompt templates for response analysis, transition generation and
transcript evaluation, the default question sets, and the fixed texts the
orchestrator falls back to when a generation call fails.
"""
from typing import Dict, List

from interview_engine.models.interview import TransitionCategory


# Question list framing

WARMUP_QUESTION_TEMPLATE = (
    "To start, could you tell me a bit about yourself and what attracted you "
    "to this {role} opportunity?"
)

CLOSING_QUESTION = (
    "Thank you for sharing. What questions do you have for me about the role "
    "or the company?"
)

DEFAULT_CORE_QUESTIONS: Dict[str, List[str]] = {
    "Software Engineer": [
        "Can you walk me through a recent technical challenge you faced and how you solved it?",
        "How do you ensure code quality in your projects?",
        "Tell me about a time you had to work with a difficult team member.",
        "How do you stay updated with new technologies?",
    ],
    "Product Manager": [
        "How do you prioritize features when everything seems important?",
        "Tell me about a product you successfully launched.",
        "How do you handle disagreements with stakeholders?",
        "What metrics do you use to measure product success?",
    ],
    "default": [
        "What accomplishment are you most proud of in your career?",
        "How do you handle pressure and tight deadlines?",
        "Describe a time when you had to learn something new quickly.",
        "What interests you most about working here?",
    ],
}


# Canonical texts

READY_ACKNOWLEDGEMENT = "Great! Let's begin."

GREETING_FALLBACK = (
    "Hello {candidate_name}, and welcome. Thank you for joining this interview for the "
    "{role} position. We'll go through {question_count} questions, which should take "
    "about {duration_minutes} minutes. Are you ready to begin?"
)

FOLLOWUP_FALLBACK = "Could you elaborate on that a bit more? A specific example would really help."

FOLLOWUP_FALLBACK_WITH_MISSING = (
    "Could you elaborate on that a bit more? In particular, I'd like to hear about {missing}."
)

CONCLUSION_FALLBACK = (
    "Thank you so much for your time today, {candidate_name}. We've completed all the "
    "interview questions. We'll review your responses and get back to you soon about next steps. "
    "Have a great day!"
)

COMPLETED_TEXT = "Thank you. The interview has been completed."


# Response analysis

RESPONSE_ANALYSIS_PROMPT = """Analyze this interview response and classify the candidate's intent.

Question Type: {question_type}
Current Question: "{question}"
Candidate's Response: "{response}"

Recent Conversation Context:
{context}

Return a JSON object:
{{
  "intent": "normal|repeat|clarify|skip|completion|offtopic",
  "is_complete": true or false,
  "quality": "brief|adequate|detailed|comprehensive",
  "has_specific_examples": true or false,
  "missing_elements": ["missing key points, empty if complete"]
}}

Intent meanings:
- normal: a standard answer to the question
- repeat: the candidate asks to hear the question again ("can you repeat that?", "what was the question?")
- clarify: the candidate asks what the question means ("what do you mean by...?", "could you clarify?")
- skip: the candidate wants to move on ("pass", "skip this one", "I'd rather not answer")
- completion: the candidate signals they are finished ("that's all", "nothing more to add")
- offtopic: the response does not address the question

IMPORTANT:
- Be lenient. A substantive answer, even a brief one, is complete.
- Any response over {complete_word_threshold} words that addresses the topic is complete.
- "I don't know" or "I haven't experienced that" is still an answer.
- Only use repeat or clarify when the candidate explicitly asks."""


# Transition generation

TRANSITION_PROMPTS: Dict[TransitionCategory, str] = {
    TransitionCategory.GREETING: """Generate a warm, professional greeting for {candidate_name}.

Role: {role}
Number of questions: {question_count}
Estimated duration: {duration_minutes} minutes

Requirements:
- Be welcoming and professional
- Mention the role briefly
- Set expectations for duration
- Ask if they're ready to begin
- Keep it concise (2-3 sentences)""",

    TransitionCategory.WARMUP_TO_CORE: """Generate a smooth transition from the warmup to the first core question.

The candidate just said: "{previous_answer}"

Acknowledge their introduction briefly, then ask exactly this question: "{question}"
Keep it natural and conversational (2-3 sentences total).""",

    TransitionCategory.CORE_TO_CORE: """Generate a brief transition to the next question.

The candidate just answered: "{previous_answer}"

Acknowledge their answer with a simple "Thank you" or "I see", then ask exactly this question: "{question}"
Do not comment on the quality of their answer.
Keep it very brief (1-2 sentences total).""",

    TransitionCategory.CORE_TO_CLOSING: """Generate a transition to the closing question.

Thank them for their responses, then ask exactly this question: "{question}"
Keep it warm but brief (2 sentences).""",

    TransitionCategory.CLARIFICATION: """The candidate asked for clarification on the question.

Original question: "{question}"
What they said: "{previous_answer}"

Rephrase the question more clearly while keeping its intent.
Be helpful and patient. Keep it concise.""",

    TransitionCategory.REPEAT: """The candidate asked you to repeat the question.

Question to repeat: "{question}"

Acknowledge their request briefly, then repeat the question word for word.
Example: "Of course, let me repeat that. [question]\"""",

    TransitionCategory.FOLLOWUP: """Ask the candidate a follow-up to get more specific information.

Original question: "{question}"
Their response: "{previous_answer}"
Missing points: {missing}

Requirements:
- Reference what they said to show you're listening
- Ask for specific elaboration on the missing points
- Keep it concise and encouraging (1-2 sentences)""",

    TransitionCategory.CONCLUSION: """Generate a professional closing for the interview.

Candidate: {candidate_name}
Role: {role}
Duration: {duration_minutes} minutes

Requirements:
- Thank them for their time
- Mention next steps briefly
- End on a positive note
- Keep it concise (2-3 sentences)""",
}


# Transcript evaluation

TRANSCRIPT_EVALUATION_PROMPT = """Analyze this interview transcript for the role of {role}.

Candidate: {candidate_name}
Duration: {duration_minutes} minutes
Questions answered: {answered} of {question_count}

Interview responses:
{responses}

Return a JSON object:
{{
  "fit_score": 1-10,
  "communication_score": 1-10,
  "technical_readiness": "short assessment",
  "summary": "2-3 sentence summary",
  "key_quotes": ["up to 3 quotes that stood out"],
  "strengths": ["strengths demonstrated"],
  "concerns": ["red flags or concerns"],
  "suggested_followups": ["questions for the next round"],
  "recommendation": "strong_yes|yes|maybe|no"
}}

Base every statement on what the candidate actually said."""
