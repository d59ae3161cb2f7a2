ERRORS = {
  "E_OPEN": "Input dump could not be opened",
  "E_PROTOCOL": "Streams are out of sync",
  "E_CAPACITY": "Fixed session capacity exceeded",
  "E_MALFORMED": "Record payload does not match its type",
}


class RedumpError(ValueError):
    code = "E_PROTOCOL"

    def __init__(self, detail: str):
        super().__init__(f"{ERRORS[self.code]}: {detail}")
        self.detail = detail


class OpenError(RedumpError):
    code = "E_OPEN"


class ProtocolError(RedumpError):
    code = "E_PROTOCOL"


class CapacityError(RedumpError):
    code = "E_CAPACITY"


class MalformedRecordError(RedumpError):
    code = "E_MALFORMED"
