# kubeSwitch/dispatch/command_registry.py
from typing import Any, Callable, Dict, Optional

# A handler receives the parsed CLI arguments and the session of the invocation.
ActionHandler = Callable[[Dict[str, Any], Any], None]


class CommandRegistry:
    """
    A singleton registry mapping CLI actions to their handler functions.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(CommandRegistry, cls).__new__(cls)
            cls._instance._handlers = {}
        return cls._instance

    def register(self, action: str, handler_function: ActionHandler):
        """
        Registers the handler for one action, replacing any previous one.

        Args:
            action (str): The action name (see the ACTION_* constants).
            handler_function (ActionHandler): Function called with (parsed_args, session).
        """
        self._handlers[action] = handler_function

    def get_handler(self, action: str) -> Optional[ActionHandler]:
        return self._handlers.get(action)


# Global command registry instance
global_command_registry = CommandRegistry()
