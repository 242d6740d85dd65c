class ExitCodes:
    SUCCESS = 0
    ERROR = 1
    INVALID_INPUT = 2
