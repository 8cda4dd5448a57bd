from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated

# Data models

# Represents an ObjectId field in the mongodb.
# It will be represented as a `str` on the model so that it can be serialized to JSON.
PyObjectId = Annotated[str, BeforeValidator(str)]
