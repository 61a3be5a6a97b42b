"""Factory for creating Melody Echo components."""

from typing import Dict, Optional, Sequence, Type

from ..audio.microphone import MicrophonePitchSampler
from ..audio.synthesizer import ToneSynthesizer
from ..audio.wav_sampler import WavFilePitchSampler
from ..exercise import EarTrainingExercise
from ..logger import get_logger
from .config import ConfigManager
from .interfaces import IPitchSampler, ISynthesizer

logger = get_logger(__name__)

# Sampler settings that only make sense for a live device
_LIVE_ONLY_SETTINGS = ("device_id", "sample_rate", "max_age")


class ComponentFactory:
    """Factory for creating Melody Echo components."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """Initialize the component factory.

        Args:
            config_manager: Configuration manager, or None to create a default one
        """
        self.config_manager = config_manager or ConfigManager()

        # Register default component implementations
        self.pitch_sampler_classes: Dict[str, Type[IPitchSampler]] = {
            "microphone": MicrophonePitchSampler,
            "wav": WavFilePitchSampler,
        }

    def create_pitch_sampler(
        self, implementation: str = "microphone", **kwargs
    ) -> IPitchSampler:
        """Create a pitch sampler.

        Args:
            implementation: Name of the implementation to use
            **kwargs: Additional parameters to pass to the constructor

        Returns:
            Pitch sampler instance

        Raises:
            ValueError: If the implementation is not registered
        """
        if implementation not in self.pitch_sampler_classes:
            raise ValueError(f"Unknown pitch sampler implementation: {implementation}")

        # Get default configuration
        config = self.config_manager.get_config("pitch_sampler")
        if implementation == "wav":
            for key in _LIVE_ONLY_SETTINGS:
                config.pop(key, None)

        # Override with provided parameters
        config.update(kwargs)

        cls = self.pitch_sampler_classes[implementation]
        instance = cls(**config)

        logger.info(f"Created pitch sampler: {implementation}")
        return instance

    def create_synthesizer(self, **kwargs) -> ISynthesizer:
        """Create the playback synthesizer with exercise timing applied."""
        config = self.config_manager.get_config("synthesizer")
        exercise_config = self.config_manager.get_config("exercise")
        config["note_duration"] = exercise_config["note_duration"]
        config["note_gap"] = exercise_config["note_gap"]
        config.update(kwargs)

        instance = ToneSynthesizer(**config)
        logger.info("Created synthesizer")
        return instance

    def create_exercise(
        self,
        sampler: Optional[IPitchSampler] = None,
        synthesizer: Optional[ISynthesizer] = None,
        sequence: Optional[Sequence[str]] = None,
    ) -> EarTrainingExercise:
        """Create an exercise wired to the given (or default) components."""
        exercise_config = self.config_manager.get_config("exercise")

        exercise = EarTrainingExercise(
            sequence=sequence or exercise_config["sequence"],
            sampler=sampler if sampler is not None else self.create_pitch_sampler(),
            synthesizer=synthesizer,
            poll_interval=exercise_config["poll_interval"],
        )
        logger.info(f"Created exercise with {len(exercise.sequence)} notes")
        return exercise
