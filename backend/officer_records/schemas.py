from __future__ import annotations
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class DocumentIn(BaseModel):
	# Stored documents are schemaless; keep whatever extra fields the client sends
	model_config = ConfigDict(extra="allow")

	def as_document(self) -> Dict[str, Any]:
		return self.model_dump(exclude_none=True)


class FamilyInformation(BaseModel):
	name: str
	relationship: str
	contactNumber: str
	cnic: str


class CourseMarks(BaseModel):
	courseId: str
	marks: float


class Pet(BaseModel):
	totalMarks: float = Field(ge=0)
	obtainedMarks: float = Field(ge=0)
	remarks: Optional[str] = None


class CompulsoryCourse(BaseModel):
	courseId: str
	# Ordered attendance/grade tokens such as P, F, ATT, NATT
	marksArray: List[str] = Field(default_factory=list)


MaritalStatus = Literal["Married", "Single", "Divorced", "Widowed"]


class OfficerIn(DocumentIn):
	name: str
	fatherName: Optional[str] = None
	cnic: Optional[str] = None
	dateOfBirth: Optional[str] = None
	bloodGroup: Optional[str] = None
	contactNumber: Optional[str] = None
	maritalStatus: Optional[MaritalStatus] = None
	classId: List[str] = Field(default_factory=list)
	emergencyContact: Optional[FamilyInformation] = None
	additionalFamilyInformation: List[FamilyInformation] = Field(default_factory=list)
	marks: List[CourseMarks] = Field(default_factory=list)
	pet: Optional[Pet] = None
	compulsoryCourses: List[CompulsoryCourse] = Field(default_factory=list)
	imageUrl: Optional[str] = None


class OfficerUpdate(DocumentIn):
	name: Optional[str] = None
	fatherName: Optional[str] = None
	cnic: Optional[str] = None
	dateOfBirth: Optional[str] = None
	bloodGroup: Optional[str] = None
	contactNumber: Optional[str] = None
	maritalStatus: Optional[MaritalStatus] = None
	classId: Optional[List[str]] = None
	emergencyContact: Optional[FamilyInformation] = None
	additionalFamilyInformation: Optional[List[FamilyInformation]] = None
	imageUrl: Optional[str] = None


class OfficerCourseMarks(BaseModel):
	officerId: str
	marks: float


class BulkCourseMarks(BaseModel):
	courseId: str
	marks: List[OfficerCourseMarks]


class CompulsoryMarksUpdate(BaseModel):
	officerId: str
	courseId: str
	marks: List[str]


class ClassIn(BaseModel):
	name: str = Field(min_length=1)
	instructorId: str = Field(min_length=1)


class ClassUpdate(DocumentIn):
	name: Optional[str] = None
	instructorId: Optional[str] = None


class EnrollOfficers(BaseModel):
	officerIds: List[str] = Field(min_length=1)


class CourseIn(BaseModel):
	courseName: str = Field(min_length=1)
	type: Literal["Compulsory", "Optional"]
	category: Optional[str] = None
	module: Optional[str] = None


class AssessmentIn(BaseModel):
	name: str = Field(min_length=1)
	totalMarks: float = Field(gt=0)


class MarkEntry(BaseModel):
	officerId: str
	marks: float = Field(ge=0)


class MarkUpdate(BaseModel):
	updatedMarks: float = Field(ge=0)


class MarkBatchUpdate(BaseModel):
	marksId: str
	marks: float = Field(ge=0)


class TraitIn(DocumentIn):
	officerId: str
	tap: Literal[1, 2]
	traitName: str
	score: float = Field(ge=0)
	total: float = Field(ge=0)


class WarningIn(DocumentIn):
	officerId: str
	type: Literal["observations", "punishment", "warningSlips"]
	punishment: str = ""
	offense: str = ""
	imageUrl: Optional[str] = None


class LeaveIn(DocumentIn):
	officerId: str
	leaveType: str
	startDate: str
	endDate: str
	reason: Optional[str] = None


class MedicalIn(DocumentIn):
	officerId: str
	date: str
	complaint: Optional[str] = None
	# ML marks medical leave; other statuses are free text
	status: Optional[str] = None
	remarks: Optional[str] = None


class KitItemIn(DocumentIn):
	officerId: str
	itemName: str
	quantity: int = Field(default=1, ge=0)
	issuedOn: Optional[str] = None
	condition: Optional[str] = None


class MovementIn(DocumentIn):
	officerId: str
	destination: str
	departedAt: str
	returnedAt: Optional[str] = None
	purpose: Optional[str] = None
