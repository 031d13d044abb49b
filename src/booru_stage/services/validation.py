"""Form validation at the service boundary."""
from __future__ import annotations

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from booru_stage.services.errors import ValidationError

__all__ = ["FormValidator"]


class FormValidator:
    """Re-check a form against its own schema before a service acts on it.

    Forms built with ``model_construct`` or mutated after construction skip
    pydantic's checks; running them again here keeps the services honest.
    """

    def validate(self, form: BaseModel) -> None:
        """Raise ``ValidationError`` listing every violated field."""
        try:
            type(form).model_validate(form.model_dump(exclude_unset=True))
        except PydanticValidationError as err:
            fields = []
            for error in err.errors():
                location = ".".join(str(part) for part in error["loc"]) or "__root__"
                if location not in fields:
                    fields.append(location)
            raise ValidationError(fields) from err
