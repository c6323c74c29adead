class AssistantNodeError(Exception):
    """Base class for all errors raised by the OpenAI Assistant node."""
    pass


class AssistantNotFoundError(AssistantNodeError):

    def __init__(self, assistant_id):
        self.assistant_id = assistant_id
        super().__init__(f"Assistant {assistant_id} not found")


class CredentialNotFoundError(AssistantNodeError):

    def __init__(self, message="OpenAI ApiKey not found"):
        super().__init__(message)


class CredentialEncryptionError(AssistantNodeError):
    """Raised when credential data cannot be encrypted or decrypted."""
    pass


class RunFailedError(AssistantNodeError):

    def __init__(self, thread_id, run_id, status, last_error=None):
        self.thread_id = thread_id
        self.run_id = run_id
        self.status = status
        self.last_error = last_error
        message = f"Error processing thread: {status}, Thread ID: {thread_id}, Run ID: {run_id}"
        if last_error:
            message += f". {last_error}"
        super().__init__(message)


class ToolOutputsEmptyError(RunFailedError):

    def __init__(self, thread_id, run_id):
        super().__init__(thread_id, run_id, "requires_action",
                         last_error="submit_tool_outputs.tool_calls are empty")


class RunTimeoutError(AssistantNodeError):

    def __init__(self, thread_id, run_id, status, waited):
        self.thread_id = thread_id
        self.run_id = run_id
        self.status = status
        self.waited = waited
        super().__init__(f"Timed out after {waited:.1f}s waiting for run to finish: {status}, Thread ID: {thread_id}, Run ID: {run_id}")
