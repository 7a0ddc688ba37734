"""LLM package — streaming generation over pluggable providers.

For new code, import from submodules directly::

    from llm.client import GenerativeClient
    from llm.generators import stream_llm_response
"""

from .client import GenerativeClient
from .generators import clean_response, settled_text, stream_llm_response

__all__ = [
    "GenerativeClient",
    "clean_response",
    "settled_text",
    "stream_llm_response",
]
