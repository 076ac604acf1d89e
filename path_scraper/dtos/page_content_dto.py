"""
DTOs for structured page content produced by the page fetcher.
"""

from pydantic import BaseModel, Field


class FormInput(BaseModel):
    """A single input, select or textarea inside a form."""

    type: str
    name: str = ""
    value: str = ""
    placeholder: str = ""


class FormDetails(BaseModel):
    action: str = ""
    method: str = Field(default="GET", description="Upper-cased HTTP method")
    inputs: list[FormInput] = Field(default_factory=list)


class ButtonDetails(BaseModel):
    """A button, submit/button input, or anchor with role="button"."""

    text: str = ""
    type: str
    href: str = ""


class PageContent(BaseModel):
    """Text, forms and buttons extracted from one fetched page."""

    text: str = ""
    forms: list[FormDetails] = Field(default_factory=list)
    buttons: list[ButtonDetails] = Field(default_factory=list)
