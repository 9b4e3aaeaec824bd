"""
Naming-convention helpers for the code generators.

Derives table, file and class names from a user-supplied model name the way
the generators need them: ``BlogPost`` -> file ``blog_post``, table
``blog_posts``, vectorizer ``blog_posts_vectorizer``. Deliberately small: only
the English plural rules that show up in table names are handled.
"""

import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")

_IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
}
_UNCOUNTABLE = frozenset({"data", "information", "metadata", "news", "series", "species"})


def underscore(name: str) -> str:
    """``BlogPost`` / ``blog-post`` / ``Blog Post`` -> ``blog_post``."""
    name = _CAMEL_BOUNDARY.sub("_", name.strip())
    name = re.sub(r"[\s\-]+", "_", name)
    return re.sub(r"_+", "_", name).lower().strip("_")


def pluralize(word: str) -> str:
    """Pluralize the last underscore-separated segment of *word*."""
    head, _, last = word.rpartition("_")
    if last in _UNCOUNTABLE:
        plural = last
    elif last in _IRREGULAR_PLURALS:
        plural = _IRREGULAR_PLURALS[last]
    elif last in _IRREGULAR_PLURALS.values() or re.search(r"[^su]s$", last):
        # already plural
        plural = last
    elif re.search(r"[^aeiou]y$", last):
        plural = last[:-1] + "ies"
    elif re.search(r"(s|x|z|ch|sh)$", last):
        plural = last + "es"
    else:
        plural = last + "s"
    return f"{head}_{plural}" if head else plural


def tableize(name: str) -> str:
    """``BlogPost`` -> ``blog_posts``."""
    return pluralize(underscore(name))


def classify(name: str) -> str:
    """``blog_post`` / ``BlogPost`` -> ``BlogPost``."""
    return "".join(part.capitalize() for part in underscore(name).split("_"))
