"""
Core building blocks shared by the view models.

Components:
- live.py: LiveValue / Mediator observable values
- scope.py: Scope, owner of background jobs and countdowns
- ports.py: TaskRepo protocol
- errors.py: TrackrError, InvalidArgument, PersistenceFailure
- state.py: AppState wiring everything together
"""
