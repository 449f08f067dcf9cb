"""
Common use metadata element methods.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


def get_center_frequency(RadarCollection, ImageFormation):
    """
    Gets the center processed frequency, if it is defined in absolute terms.

    Parameters
    ----------
    RadarCollection : None|sarproj.elements.RadarCollection.RadarCollectionType
    ImageFormation : None|sarproj.elements.ImageFormation.ImageFormationType

    Returns
    -------
    None|float
        `None` when the processed band is not populated, or frequencies are
        reference offsets.
    """

    if RadarCollection is not None and RadarCollection.has_reference_offset:
        return None
    if ImageFormation is None or ImageFormation.TxFrequencyProc is None:
        return None
    return ImageFormation.TxFrequencyProc.center_frequency
