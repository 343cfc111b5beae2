import json
import os

import openai

from config import settings


class OpenAIClient:
    """Thin wrapper over the OpenAI chat API used to narrate spending insights."""

    SYSTEM_MESSAGE = (
        "You are a concise household finance assistant. Given spending figures "
        "and rule-based insights, write two or three sentences of practical advice. "
        "Do not invent numbers."
    )

    def __init__(self, api_key=None, model=None):
        """
        Args:
            api_key (str, optional): Falls back to OPENAI_API_KEY.
            model (str, optional): Falls back to the OPENAI_MODEL setting.

        Raises:
            ValueError: If no API key is available
        """
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError("OPENAI_API_KEY is not set")

        self.client = openai.OpenAI(api_key=self.api_key)
        self.model = model or settings.openai_model

    @staticmethod
    def is_configured():
        return bool(os.environ.get("OPENAI_API_KEY"))

    def complete(self, system_message, user_message, temperature=0.3):
        """Run one system + user exchange and return the reply text."""
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_message},
                {"role": "user", "content": user_message},
            ],
            temperature=temperature,
        )
        return response.choices[0].message.content

    def narrate_insights(self, totals, insights):
        """
        Turn computed totals and rule-based insights into a short narrative.

        Args:
            totals (dict): Income, expense and cash flow figures
            insights (list): Insight dictionaries from the analyzer

        Returns:
            str: Narrative text
        """
        payload = json.dumps({"totals": totals, "insights": insights}, default=str)
        return self.complete(self.SYSTEM_MESSAGE, payload)
