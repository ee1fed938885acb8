"""Errors raised while turning menu site HTML into domain models."""


class ParseError(Exception):
    """Base class for every menu parsing failure."""


class MissingElementError(ParseError):
    """An expected element was not found."""

    def __init__(self, element: str, context: str) -> None:
        self.element = element
        self.context = context
        super().__init__(element, context)

    def __str__(self) -> str:
        return f"Every {self.context} element should have a {self.element}."


class MissingAttributeError(ParseError):
    """An element was found but lacks a required attribute."""

    def __init__(self, element: str, attribute: str) -> None:
        self.element = element
        self.attribute = attribute
        super().__init__(element, attribute)

    def __str__(self) -> str:
        return f"The {self.element} element has no `{self.attribute}` attribute."


class TextNodeError(ParseError):
    """An element did not hold exactly one text node."""

    def __init__(self, field: str, count: int, position: str | None = None) -> None:
        self.field = field
        self.count = count
        self.position = position
        super().__init__(field, count, position)

    def __str__(self) -> str:
        if self.count == 0:
            message = f"{self.field} should have text inside."
        else:
            message = (
                f"{self.field.capitalize()} element should only have one text node "
                f"inside of it, found {self.count}."
            )
        if self.position is not None:
            return f"{message} ({self.position})"
        return message


class PriceFormatError(ParseError):
    """A price string could not be read as a USD amount."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(text)

    def __str__(self) -> str:
        return f"Price {self.text!r} is not a valid USD amount."


class UnrecognizedAllergenIconError(ParseError):
    """An allergen legend icon URL is not in the known table."""

    def __init__(self, icon_url: str) -> None:
        self.icon_url = icon_url
        super().__init__(icon_url)

    def __str__(self) -> str:
        return f"Unknown allergen image url: {self.icon_url}"


class DateFormatError(ParseError):
    """The menu date field is not in MM/DD/YYYY form."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(value)

    def __str__(self) -> str:
        return f"Date {self.value!r} is not in valid format."


class MissingSectionHeaderError(ParseError):
    """A meal's item rows did not start with a section header."""

    def __str__(self) -> str:
        return "Every section should have a name as the first element."


class MissingQueryParameterError(ParseError):
    """A location URL lacks a required query parameter."""

    def __init__(self, parameter: str, url: str) -> None:
        self.parameter = parameter
        self.url = url
        super().__init__(parameter, url)

    def __str__(self) -> str:
        return (
            f"Location url {self.url} does not include the "
            f"`{self.parameter}` query parameter"
        )
