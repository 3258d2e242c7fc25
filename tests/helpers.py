from taskflow.database.models.enums import RESOURCE_ACTIONS, Role


def every_triple():
    """Yield every (role, resource, action) triple the vocabulary allows."""
    for role in Role:
        for resource, actions in RESOURCE_ACTIONS.items():
            for action in actions:
                yield role, resource, action
