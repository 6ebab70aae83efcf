"""
Prompt templates and fixed replies for question answering.
"""

from langchain_core.prompts import PromptTemplate


# System prompt restricting answers to the retrieved context
SYSTEM_INSTRUCTION = (
    "You are a helpful assistant that answers questions based on the provided context. "
    "Use only the information from the context to answer questions. "
    "If the context doesn't contain enough information to answer the question, say so."
)


# Single user turn carrying both context and question
QA_TEMPLATE = """Context: {context}

Question: {question}"""

QA_PROMPT = PromptTemplate.from_template(QA_TEMPLATE)


# Returned without calling the model when retrieval finds nothing
NO_CONTEXT_MESSAGE = (
    "I couldn't find relevant information in the uploaded documents to answer your question."
)

# Returned when the model answers with empty content
NO_RESPONSE_MESSAGE = "No response generated"


def build_user_message(context: str, question: str) -> str:
    """
    Render the user message sent to the chat model.

    Args:
        context: Assembled fragment texts
        question: The user's question

    Returns:
        ``"Context: {context}\\n\\nQuestion: {question}"``
    """
    return QA_PROMPT.format(context=context, question=question)
