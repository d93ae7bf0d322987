"""Error taxonomy for the game core, room registry and transport.

Every error carries a short user-facing ``message``. Rule violations are
caller-contract errors raised by the game session; room errors are surfaced
to the offending client only.
"""


class YahtzeeError(Exception):
    message = 'Something went wrong'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ---- Game rule violations ----

class RuleViolation(YahtzeeError):
    message = 'That move is not allowed'


class InvalidCategory(RuleViolation):
    message = 'Unknown scoring category'


class InvalidDice(RuleViolation):
    message = 'Dice must be five values between 1 and 6'


class InvalidDieIndex(RuleViolation):
    message = 'Die index must be between 0 and 4'


class NotYourTurn(RuleViolation):
    message = 'It is not your turn'


class CategoryAlreadySet(RuleViolation):
    message = 'Category already scored'


class NoRollYet(RuleViolation):
    message = 'Roll the dice first'


class NoRollsLeft(RuleViolation):
    message = 'No rolls left this turn'


class GameAlreadyOver(RuleViolation):
    message = 'The game is already over'


# ---- Room / lobby errors ----

class RoomError(YahtzeeError):
    message = 'Room error'


class RoomNotFound(RoomError):
    message = 'Room not found'


class RoomFull(RoomError):
    message = 'Room is full'


class GameInProgress(RoomError):
    message = 'Game already in progress'


class NotHost(RoomError):
    message = 'Only host can start the game'


class WrongPlayerCount(RoomError):
    message = 'Wrong number of players'


class NotInRoom(RoomError):
    message = 'You are not in a room'


class GameNotStarted(RoomError):
    message = 'Game has not started'


# ---- Protocol / transport ----

class MalformedMessage(YahtzeeError):
    message = 'Malformed message'


class TransportUnavailable(YahtzeeError):
    message = 'Unable to connect to the game server'
