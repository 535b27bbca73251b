import re

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """BlogPost -> blog_post, HTTPRequest -> http_request"""
    return _CAMEL_BOUNDARY.sub("_", name).replace("-", "_").lower()


def pluralize(word: str) -> str:
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def table_name(model) -> str:
    """Table name from metadata override, else the snake_case plural of the model name"""
    if model.metadata.table_name:
        return model.metadata.table_name
    return pluralize(snake_case(model.name))


def route_segment(model_name: str) -> str:
    return model_name.lower()


def human_plural(model_name: str) -> str:
    return pluralize(model_name)
