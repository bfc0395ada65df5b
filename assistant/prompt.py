from __future__ import annotations

from langchain_core.prompts import PromptTemplate


SYSTEM_PROMPT = "You are a women's health assistant."

QUESTION_PROMPT = PromptTemplate.from_template(SYSTEM_PROMPT + " Question: {message}")

FALLBACK_REPLY = "I'm sorry, I couldn't generate a response."


def build_prompt(message: str) -> str:
    return QUESTION_PROMPT.format(message=message)
