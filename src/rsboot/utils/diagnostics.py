from typing import Optional
from pydantic import BaseModel

class StepDiagnostic(BaseModel):
    """
    Record of a startup step that did not go as planned but did not stop the boot.
    """
    step: str
    message: str
    severity: str = "warning" # 'warning', 'error'
    command: Optional[str] = None

class ConfigPatchError(Exception):
    """
    Raised when the server configuration file cannot be read or written.
    Startup cannot continue past this.
    """
    def __init__(self, message: str, path: str = None):
        self.message = message
        self.path = path
        ctx = f" '{path}'" if path else ""
        super().__init__(f"Config Patch Error{ctx}: {message}")
