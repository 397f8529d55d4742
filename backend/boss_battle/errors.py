"""Rejections raised by game operations before any state is mutated."""


class ActionRejected(Exception):
    reason = 'rejected'

    def __init__(self, message=None, expected=None):
        super().__init__(message or self.reason)
        self.expected = expected

    def to_dict(self):
        payload = {'ok': False, 'reason': self.reason}
        if self.expected is not None:
            payload['expected'] = self.expected
        return payload


class NotYourTurn(ActionRejected):
    reason = 'not-your-turn'


class ActorDefeated(ActionRejected):
    reason = 'player-dead'


class InvalidTarget(ActionRejected):
    reason = 'invalid-target'


class UnknownAction(ActionRejected):
    reason = 'unknown-action'


class UnknownAbility(ActionRejected):
    reason = 'unknown-ability'


class AbilityNotHeld(ActionRejected):
    reason = 'ability-not-held'
